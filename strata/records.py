"""Record collection class"""

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any

from strata.errors import IllegalDestroy, IllegalMutation, InvalidRecord
from strata.mutation import BatchMutation, MutationProxy

if TYPE_CHECKING:
    from strata.model import Model
    from strata.record import Record


class RecordCollection:
    """
    Ordered rows returned by a query, sharing one destroyed flag.

    Records are only built when an index is read, and the same handle is
    returned for repeated reads of one index.

    Usage:
        posts = posts_model.where(user_id=1).evaluate()
        len(posts)
        posts[0].title
        posts.mutate(lambda batch: batch.set("title", "Archived"))
        posts.destroy()
    """

    def __init__(self, model: "Model", rows: list[dict[str, Any]], destroyed: bool = False):
        self._model = model
        self._rows = rows
        self._destroyed = destroyed
        self._records: dict[int, "Record"] = {}

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def ids(self) -> list[int]:
        return [row["id"] for row in self._rows]

    def __len__(self) -> int:
        return len(self._rows)

    def __getitem__(self, index: int) -> "Record":
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"Collection indices must be integers, not {type(index).__name__}")
        if index < 0:
            index += len(self._rows)
        if not 0 <= index < len(self._rows):
            raise IndexError("Collection index out of range")

        record = self._records.get(index)
        if record is None:
            record = self._model.Record(self._rows[index], saved=True, destroyed=self._destroyed)
            self._records[index] = record
        return record

    def __iter__(self) -> Iterator["Record"]:
        for index in range(len(self._rows)):
            yield self[index]

    def destroy(self) -> "RecordCollection":
        """Delete every row with one statement"""
        if self._destroyed:
            raise IllegalDestroy("Shouldn't destroy already destroyed records")

        if self._rows:
            self._model.delete_rows(self.ids)
        self._destroyed = True
        for record in self._records.values():
            record._destroyed = True
        return self

    def mutate(self, mutation: Callable[[BatchMutation], Any]) -> "RecordCollection":
        """
        Apply one set of writes to every row with a single UPDATE.

        The callback receives a write-only BatchMutation. All rows share the
        new `updated` timestamp.
        """
        if self._destroyed:
            raise IllegalMutation("Shouldn't mutate destroyed records")
        # Batch values are written into every member row, so pending writes would be lost
        if any(not record.saved for record in self._records.values()):
            raise IllegalMutation(
                "Shouldn't mutate records with unsaved(dirty) members, save them first"
            )

        batch = BatchMutation(self._model)
        mutation(batch)
        changes = batch.changes
        if not changes or not self._rows:
            return self

        invalid = self._model.invalid_fields(changes)
        if invalid:
            raise InvalidRecord(self._model.table_name, invalid)

        updated = self._model.update_rows(changes, self.ids)
        for row in self._rows:
            row.update(changes)
            row["updated"] = updated
        return self

    def mutate_each(self, mutation: Callable[[MutationProxy], Any]) -> "RecordCollection":
        """
        Run the callback once per row; each touched row gets its own UPDATE.

        Rows the callback does not write to are left alone.
        """
        if self._destroyed:
            raise IllegalMutation("Shouldn't mutate destroyed records")

        for record in self:
            record._apply_mutation(mutation, skip_untouched=True)
        return self

    def to_list(self) -> list["Record"]:
        return list(self)

    def __repr__(self) -> str:
        return f"<RecordCollection {self._model.table_name} ids={self.ids!r}>"
