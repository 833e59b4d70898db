"""Record class"""

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from strata.errors import (
    IllegalDestroy,
    IllegalMutation,
    InvalidRecord,
    ReadOnlyField,
    ReadOnlyRecord,
    UnknownField,
)
from strata.mutation import MutationProxy

if TYPE_CHECKING:
    from strata.model import Model


class Record:
    """
    In-memory handle to one row.

    A record is New until its first save, Saved while it matches storage,
    Dirty (saved is False) after any field write, and Destroyed once its row
    is deleted. Every model builds its own subclass with one read-only property
    per column and relation; writes go through set(), which validates the
    value against the column type immediately.

    Usage:
        user = users.new(name="Maxwell", account="maxwell-1", married=False)
        user.age = 18
        user.save()
        user.mutate(lambda u: u.set("age", u.age + 1))
        user.destroy()
    """

    _model: ClassVar["Model"]

    def __init__(
        self,
        row: dict[str, Any] | None = None,
        *,
        new: bool = False,
        saved: bool = False,
        destroyed: bool = False,
    ):
        self._row = row if row is not None else {}
        self._new = new
        self._saved = saved
        self._destroyed = destroyed

    # Lifecycle status
    @property
    def saved(self) -> bool:
        """True while the in-memory values match storage"""
        return self._saved

    @property
    def persisted(self) -> bool:
        """True once the record has been inserted"""
        return not self._new

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def valid(self) -> bool:
        """Whether the current values would pass save() validation"""
        return not self._model.invalid_fields(self._fields())

    # Generic accessors
    def get(self, name: str) -> Any:
        """Read a column or relation by name"""
        accessor = self._model.accessors.get(name)
        if accessor is None:
            raise UnknownField(name, self._model.table_name)
        return accessor.getter(self)

    def set(self, name: str, value: Any) -> None:
        """Write a column by name, validating the value against its type"""
        if self._destroyed:
            raise ReadOnlyRecord()
        accessor = self._model.accessors.get(name)
        if accessor is None:
            raise UnknownField(name, self._model.table_name)
        if accessor.setter is None:
            raise ReadOnlyField(name)
        accessor.setter(self, value)

    def _raw(self, name: str) -> Any:
        return self._row.get(name)

    def _write(self, name: str, value: Any) -> None:
        self._row[name] = value
        self._saved = False

    def _fields(self) -> dict[str, Any]:
        return {name: self._row.get(name) for name in self._model.field_types}

    def _check_valid(self, values: Mapping[str, Any]) -> None:
        invalid = self._model.invalid_fields(values)
        if invalid:
            raise InvalidRecord(self._model.table_name, invalid)

    # Lifecycle transitions
    def save(self) -> "Record":
        """Insert a new record or update a persisted one"""
        if self._destroyed:
            raise ReadOnlyRecord()
        values = self._fields()
        self._check_valid(values)

        if self._new:
            self._row.update(self._model.insert_row(values))
            self._new = False
        else:
            self._row["updated"] = self._model.update_row(values, self._row["id"])

        self._saved = True
        return self

    def mutate(self, mutation: Callable[[MutationProxy], Any]) -> "Record":
        """
        Atomically read-modify-write a saved record.

        The callback receives a MutationProxy; its writes are validated and
        applied with a single UPDATE. If the callback raises, or the result is
        invalid, neither memory nor storage changes.
        """
        self._apply_mutation(mutation, skip_untouched=False)
        return self

    def _apply_mutation(self, mutation: Callable[[MutationProxy], Any], skip_untouched: bool) -> bool:
        if self._new:
            raise IllegalMutation("Shouldn't mutate a record that has never been saved")
        if self._destroyed:
            raise IllegalMutation("Shouldn't mutate destroyed record")
        if not self._saved:
            raise IllegalMutation(
                "Shouldn't mutate unsaved(dirty) record, mutation only applies to saved records"
            )

        proxy = MutationProxy(self)
        mutation(proxy)
        changes = proxy.changes
        if skip_untouched and not changes:
            return False

        self._check_valid({**self._fields(), **changes})
        updated = self._model.update_row(changes, self._row["id"])
        self._row.update(changes)
        self._row["updated"] = updated
        return True

    def destroy(self) -> "Record":
        """Delete the row; the record becomes read-only"""
        if self._new:
            raise IllegalDestroy("Shouldn't destroy a record that has never been saved")
        if self._destroyed:
            raise IllegalDestroy("Shouldn't destroy already destroyed record")
        if not self._saved:
            raise IllegalDestroy("Shouldn't destroy unsaved(dirty) record")

        self._model.delete_row(self._row["id"])
        self._destroyed = True
        return self

    def to_dict(self) -> dict[str, Any]:
        """User-facing values of id, every declared column, created and updated"""
        names = ["id", *self._model.field_types, "created", "updated"]
        return {name: self.get(name) for name in names}

    def __getattr__(self, name: str) -> Any:
        # Only reached for names without a generated property
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        else:
            self.set(name, value)

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def __repr__(self) -> str:
        state = "destroyed" if self._destroyed else "new" if self._new else "saved" if self._saved else "dirty"
        return f"<{type(self).__name__} id={self._row.get('id')!r} {state}>"
