"""
Accessor table behind record attribute access.

Every name a record answers to (declared columns, the reserved id/created/updated
columns and relation names) maps to one FieldAccessor, built when the schema or
the relation is registered on the model.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from strata.entities import FieldDefinition, Relationship
from strata.errors import TypeMismatch
from strata.types import Type

if TYPE_CHECKING:
    from strata.record import Record


@dataclass(frozen=True)
class FieldAccessor:
    """Getter, setter and validator for one record attribute.

    `validator` checks a user value and returns its stored form; `setter` is
    None for read-only names.
    """

    name: str
    getter: Callable[["Record"], Any]
    setter: Callable[["Record", Any], None] | None = None
    validator: Callable[[Any], Any] | None = None


def _validator(name: str, column_type: Type) -> Callable[[Any], Any]:
    def validate(value: Any) -> Any:
        # Nulls pass here; required columns are checked on save
        if value is None:
            return None
        if not column_type.valid_assignment(value):
            raise TypeMismatch(name, column_type.name)
        return column_type.assign(value)

    return validate


def column_accessor(definition: FieldDefinition) -> FieldAccessor:
    name = definition.name
    column_type = definition.type
    validate = _validator(name, column_type)

    def getter(record: "Record") -> Any:
        return column_type.output(record._raw(name), record, name)

    def setter(record: "Record", value: Any) -> None:
        record._write(name, validate(value))

    return FieldAccessor(name, getter, setter, validate)


def reserved_accessor(name: str, column_type: Type) -> FieldAccessor:
    def getter(record: "Record") -> Any:
        return column_type.output(record._raw(name))

    return FieldAccessor(name, getter)


def has_many_accessor(relationship: Relationship) -> FieldAccessor:
    target = relationship.target
    foreign_key = relationship.foreign_key

    def getter(record: "Record") -> Any:
        record_id = record._raw("id")
        # Unsaved records own no rows; a NULL id must not match NULL foreign keys
        if record_id is None:
            return target.query().none()
        return target.where({foreign_key: record_id})

    return FieldAccessor(relationship.name, getter)


def belongs_to_accessor(relationship: Relationship) -> FieldAccessor:
    target = relationship.target
    foreign_key = relationship.foreign_key

    def getter(record: "Record") -> Any:
        return target.find(record._raw(foreign_key))

    return FieldAccessor(relationship.name, getter)
