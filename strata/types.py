"""
Scalar column types.

Each type knows how a value is stored in SQLite, how it is validated when a
user assigns it and when it is read back from storage, and how it renders as
a SQL literal.

Usage:
    from strata.types import BOOLEAN, INTEGER, STRING, EnumType

    fields = [
        FieldDefinition(name="name", type=STRING, required=True),
        FieldDefinition(name="status", type=EnumType(["draft", "published"])),
    ]
"""

from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from strata.errors import DuplicateEnumKey, EnumTransitionBoundary

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class StateOwner(Protocol):
    """Anything an enum state handle can be bound to (records, mutation proxies)."""

    def _raw(self, field_name: str) -> Any: ...

    def set(self, field_name: str, value: Any) -> None: ...

    def save(self) -> Any: ...


def _is_natural(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


class Type:
    """Base column type: a string stored as a quoted literal."""

    name = "string"
    sql_type = "VARCHAR(255)"
    string_format = True
    comparable = False

    def valid_assignment(self, value: Any) -> bool:
        return isinstance(value, str)

    def valid_storage_input(self, value: Any) -> bool:
        return isinstance(value, str)

    def output(self, value: Any, owner: StateOwner | None = None, field_name: str | None = None) -> Any:
        """Convert a stored value into what users read."""
        if value is None:
            return None
        return str(value)

    def assign(self, value: Any) -> Any:
        """Convert a user value into its stored representation."""
        return value

    def format_for_statement(self, value: Any) -> str:
        """Render a stored value as a SQL literal"""
        if value is None:
            return "NULL"
        if self.string_format:
            escaped = str(value).replace("'", "''")
            return f"'{escaped}'"
        return str(value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class IntegerType(Type):
    name = "integer"
    sql_type = "INTEGER"
    string_format = False
    comparable = True

    def valid_assignment(self, value: Any) -> bool:
        return _is_natural(value)

    def valid_storage_input(self, value: Any) -> bool:
        return _is_natural(value)

    def output(self, value, owner=None, field_name=None):
        if value is None:
            return None
        return int(value)


class StringType(Type):
    pass


class TextType(Type):
    name = "text"
    sql_type = "TEXT"


class TimestampType(Type):
    """Epoch milliseconds in storage, timezone-aware datetimes for users."""

    name = "timestamp"
    sql_type = "INTEGER"
    string_format = False
    comparable = True

    def valid_assignment(self, value: Any) -> bool:
        if isinstance(value, datetime):
            return self.assign(value) >= 0
        return _is_natural(value)

    def valid_storage_input(self, value: Any) -> bool:
        return _is_natural(value)

    def output(self, value, owner=None, field_name=None):
        if value is None:
            return None
        return EPOCH + timedelta(milliseconds=value)

    def assign(self, value: Any) -> int:
        if isinstance(value, datetime):
            # Naive datetimes are taken as UTC
            if value.tzinfo is None:
                value = value.replace(tzinfo=UTC)
            return (value - EPOCH) // timedelta(milliseconds=1)
        return value


class BooleanType(Type):
    name = "boolean"
    sql_type = "BOOLEAN"
    string_format = False

    def valid_assignment(self, value: Any) -> bool:
        return isinstance(value, bool)

    def valid_storage_input(self, value: Any) -> bool:
        return value in (0, 1) and not isinstance(value, bool)

    def output(self, value, owner=None, field_name=None):
        if value is None:
            return None
        return value == 1

    def assign(self, value: Any) -> int:
        return 1 if value is True else 0


class EnumState:
    """
    Handle over the current state of one enum column.

    The handle never copies the value: it keeps its owner and the field name
    and reads the stored index on every access, so it always reflects the
    owner's current state.

    Usage:
        task.status.active          # True when the state is "active"
        task.status["in-review"]    # same check for non-identifier names
        task.status.next(save=True) # move to the following state and save
    """

    def __init__(
        self,
        enum_type: "EnumType",
        owner: StateOwner | None = None,
        field_name: str | None = None,
        index: int | None = None,
    ):
        object.__setattr__(self, "_enum_type", enum_type)
        object.__setattr__(self, "_owner", owner)
        object.__setattr__(self, "_field_name", field_name)
        object.__setattr__(self, "_index", index)

    @property
    def keys(self) -> list[str]:
        return list(self._enum_type.keys)

    @property
    def index(self) -> int | None:
        if self._owner is None:
            return self._index
        return self._owner._raw(self._field_name)

    @property
    def value(self) -> str | None:
        index = self.index
        return None if index is None else self._enum_type.keys[index]

    def next(self, save: bool = False) -> "EnumState":
        """Move the owner to the following state"""
        index = self._require_index("next")
        if index + 1 == len(self._enum_type.keys):
            raise EnumTransitionBoundary(
                "Ending state cannot be transitioned to the next state"
            )
        return self._transition(index + 1, save)

    def previous(self, save: bool = False) -> "EnumState":
        """Move the owner to the preceding state"""
        index = self._require_index("previous")
        if index == 0:
            raise EnumTransitionBoundary(
                "Starting state cannot be transitioned to the previous state"
            )
        return self._transition(index - 1, save)

    def _require_index(self, direction: str) -> int:
        index = self.index
        if index is None:
            raise EnumTransitionBoundary(
                f"Nullish state cannot be transitioned to the {direction} state"
            )
        return index

    def _transition(self, index: int, save: bool) -> "EnumState":
        if self._owner is None:
            raise EnumTransitionBoundary("Unbound state cannot be transitioned")
        self._owner.set(self._field_name, self._enum_type.keys[index])
        if save:
            self._owner.save()
        return self

    def __getitem__(self, state: str) -> bool:
        if state not in self._enum_type.keys:
            raise KeyError(state)
        return self.value == state

    def __getattr__(self, name: str) -> bool:
        if name.startswith("_") or name not in self._enum_type.keys:
            raise AttributeError(name)
        return self.value == name

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("State's transition status is read-only")

    def __eq__(self, other: object) -> bool:
        if isinstance(other, EnumState):
            return self.value == other.value
        if isinstance(other, str) or other is None:
            return self.value == other
        return NotImplemented

    # The value changes with the owner, so handles cannot be hashed
    __hash__ = None

    def __str__(self) -> str:
        return "" if self.value is None else self.value

    def __repr__(self) -> str:
        return f"EnumState({self.value!r}, keys={self._enum_type.keys!r})"


class EnumType(Type):
    """Ordered set of named states stored as their integer index."""

    name = "enum"
    sql_type = "INTEGER"
    string_format = False

    def __init__(self, keys: list[str]):
        keys = list(keys)
        if len(set(keys)) != len(keys):
            raise DuplicateEnumKey(keys)
        self.keys = tuple(keys)

    def valid_assignment(self, value: Any) -> bool:
        if isinstance(value, EnumState):
            value = value.value
        return isinstance(value, str) and value in self.keys

    def valid_storage_input(self, value: Any) -> bool:
        return _is_natural(value) and value < len(self.keys)

    def output(self, value, owner=None, field_name=None) -> EnumState:
        # Unset enums still produce a handle so transitions report a clear error
        if owner is None:
            return EnumState(self, index=value)
        return EnumState(self, owner, field_name)

    def assign(self, value: Any) -> int:
        if isinstance(value, EnumState):
            value = value.value
        return self.keys.index(value)

    def __repr__(self) -> str:
        return f"EnumType({list(self.keys)!r})"


INTEGER = IntegerType()
STRING = StringType()
TEXT = TextType()
TIMESTAMP = TimestampType()
BOOLEAN = BooleanType()


class Types:
    """Namespace mirroring the module level type instances."""

    Integer = INTEGER
    String = STRING
    Text = TEXT
    Timestamp = TIMESTAMP
    Boolean = BOOLEAN
    Enum = EnumType
