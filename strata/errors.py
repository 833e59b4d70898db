"""Exceptions raised by strata models, records and queries."""


class StrataError(Exception):
    """Base class for every error raised by strata."""


class SchemaError(StrataError, ValueError):
    """Raised when a model is declared with an invalid field schema."""


class TypeMismatch(StrataError, TypeError):
    def __init__(self, field_name: str, type_name: str):
        self.field_name = field_name
        self.type_name = type_name
        super().__init__(
            f"Wrong type format when assigning into column `{field_name}` "
            f"with type `{type_name}`"
        )


class UnknownField(StrataError, AttributeError):
    """Raised when reading, writing or filtering an undeclared field.

    Subclasses AttributeError so getattr() and hasattr() behave normally on records.
    """

    def __init__(self, field_name: str, table_name: str):
        self.field_name = field_name
        self.table_name = table_name
        super().__init__(f"No column `{field_name}` exists in table `{table_name}`")


class ReadOnlyField(StrataError, AttributeError):
    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Cannot assign value to read-only field `{field_name}`")


class ReadOnlyRecord(StrataError):
    def __init__(self):
        super().__init__("Record is read-only since it has been destroyed")


class InvalidRecord(StrataError, ValueError):
    def __init__(self, table_name: str, invalid_fields: list[str]):
        self.table_name = table_name
        self.invalid_fields = invalid_fields
        super().__init__(
            f"Record format isn't correct for table `{table_name}`: "
            f"invalid fields {', '.join(invalid_fields)}"
        )


class IllegalMutation(StrataError):
    """Raised when mutating a record that is new, dirty or destroyed."""


class IllegalDestroy(StrataError):
    """Raised when destroying a record that is new, dirty or already destroyed."""


class UncomparableType(StrataError, TypeError):
    def __init__(self, field_name: str, type_name: str):
        self.field_name = field_name
        self.type_name = type_name
        super().__init__(
            f"Column `{field_name}` with type `{type_name}` does not support comparison"
        )


class UnsupportedOperator(StrataError, ValueError):
    def __init__(self, operator: str):
        self.operator = operator
        super().__init__(f"Unsupported comparison operator `{operator}`")


class InvalidLimit(StrataError, ValueError):
    def __init__(self, count):
        self.count = count
        super().__init__(f"Should specify a positive count in limit expression, got {count!r}")


class DuplicateEnumKey(StrataError, ValueError):
    def __init__(self, keys):
        self.keys = list(keys)
        super().__init__(f"Duplicated keys are not allowed: {self.keys}")


class EnumTransitionBoundary(StrataError):
    """Raised when an enum state cannot move past its first or last state."""
