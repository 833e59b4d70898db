"""Proxies handed to mutate() callbacks"""

from typing import TYPE_CHECKING, Any

from strata.entities import RESERVED_FIELDS
from strata.errors import IllegalMutation, ReadOnlyField, UnknownField

if TYPE_CHECKING:
    from strata.model import Model
    from strata.record import Record


class _StagedChanges:
    """Validates writes against the model schema and stages them without touching storage"""

    def __init__(self, model: "Model"):
        object.__setattr__(self, "_model", model)
        object.__setattr__(self, "_changes", {})

    @property
    def changes(self) -> dict[str, Any]:
        """Stored values written so far, keyed by column"""
        return dict(self._changes)

    def set(self, name: str, value: Any) -> None:
        if name in RESERVED_FIELDS:
            raise ReadOnlyField(name)
        if name not in self._model.field_types:
            raise UnknownField(name, self._model.table_name)
        self._changes[name] = self._model.accessors[name].validator(value)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        else:
            self.set(name, value)

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)


class MutationProxy(_StagedChanges):
    """
    View of one record given to Record.mutate().

    Reads return the staged value when the callback already wrote the field,
    the record's value otherwise. `id`, `created` and `updated` are read-only.
    """

    def __init__(self, record: "Record"):
        super().__init__(record._model)
        object.__setattr__(self, "_record", record)

    def _raw(self, name: str) -> Any:
        if name in self._changes:
            return self._changes[name]
        return self._record._raw(name)

    def get(self, name: str) -> Any:
        if name in RESERVED_FIELDS:
            return self._record.get(name)
        column_type = self._model.field_types.get(name)
        if column_type is None:
            raise UnknownField(name, self._model.table_name)
        return column_type.output(self._raw(name), self, name)

    def save(self) -> None:
        raise IllegalMutation("Cannot save a record from inside its own mutation")

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get(name)

    def __getitem__(self, name: str) -> Any:
        return self.get(name)


class BatchMutation(_StagedChanges):
    """Write-only proxy given to RecordCollection.mutate(); one set of changes for every row"""

    def get(self, name: str) -> Any:
        raise IllegalMutation(f"Cannot read `{name}` from a batch mutation, it is write-only")

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get(name)

    def __getitem__(self, name: str) -> Any:
        return self.get(name)
