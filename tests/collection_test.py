"""
Tests for RecordCollection: lazy indexing, batch destroy and batch mutation.
"""

import re

import pytest

from strata import track_queries
from strata.errors import IllegalDestroy, IllegalMutation, InvalidRecord, ReadOnlyRecord, TypeMismatch


class TestIndexing:
    """Test cases for lazily materialized records"""

    def test_length(self, seeded):
        users, _ = seeded

        assert len(users.all()) == 10

    def test_records_are_built_on_access(self, seeded):
        users, _ = seeded
        records = users.all()

        assert records._records == {}
        first = records[0]
        assert list(records._records) == [0]
        assert records[0] is first

    def test_indexed_records_are_saved(self, seeded):
        users, _ = seeded
        record = users.all()[3]

        assert record.id == 4
        assert record.saved is True
        assert record.persisted is True
        assert record.destroyed is False

    def test_negative_index(self, seeded):
        users, _ = seeded

        assert users.all()[-1].id == 10

    def test_out_of_range(self, seeded):
        users, _ = seeded

        with pytest.raises(IndexError):
            users.all()[10]

    def test_non_integer_index(self, seeded):
        users, _ = seeded

        with pytest.raises(TypeError):
            users.all()["name"]

    def test_iteration_and_ids(self, seeded):
        users, _ = seeded
        records = users.first(3).evaluate()

        assert [record.account for record in records] == ["maxwell-1", "maxwell-2", "maxwell-3"]
        assert records.ids == [1, 2, 3]
        assert len(records.to_list()) == 3


class TestBatchDestroy:
    """Test cases for destroying a whole collection"""

    def test_destroy_removes_matching_rows(self, seeded):
        users, _ = seeded
        records = users.where({"age": {"lte": 9}}).evaluate()
        materialized = records[0]

        records.destroy()

        assert len(users.all()) == 10 - len(records)
        assert records.destroyed is True
        assert materialized.destroyed is True
        assert all(record.destroyed for record in records)

    def test_destroy_issues_one_statement(self, seeded):
        users, _ = seeded
        records = users.first(3).evaluate()

        with track_queries() as tracker:
            records.destroy()

        assert tracker.statements() == ["DELETE FROM users WHERE id IN (1,2,3)"]

    def test_destroy_twice(self, seeded):
        users, _ = seeded
        records = users.first(2).evaluate()
        records.destroy()

        with pytest.raises(IllegalDestroy):
            records.destroy()

    def test_members_become_read_only(self, seeded):
        users, _ = seeded
        records = users.first(2).evaluate()
        records.destroy()

        with pytest.raises(ReadOnlyRecord):
            records[1].age = 5

    def test_destroy_empty_collection(self, users):
        records = users.all()

        with track_queries() as tracker:
            records.destroy()

        assert tracker.count() == 0
        assert records.destroyed is True


class TestBatchMutate:
    """Test cases for one UPDATE over every row"""

    def test_mutate_updates_every_row(self, seeded):
        users, _ = seeded
        records = users.where({"age": {"gt": 20}}).evaluate()

        with track_queries() as tracker:
            records.mutate(lambda batch: batch.set("married", True))

        assert tracker.count() == 1
        assert re.fullmatch(
            r"UPDATE users SET married=1, updated=\d+ WHERE id IN \(7,8,9,10\)",
            tracker.statements()[0],
        )
        assert all(record.married is True for record in records)
        assert len({record.updated for record in records}) == 1
        assert users.find(7).married is True
        assert users.find(6).married is False

    def test_batch_is_write_only(self, seeded):
        users, _ = seeded
        records = users.all()

        def mutation(batch):
            batch.age = batch.age + 1

        with pytest.raises(IllegalMutation):
            records.mutate(mutation)

    def test_invalid_batch_value(self, seeded):
        users, _ = seeded
        records = users.all()

        with pytest.raises(TypeMismatch):
            records.mutate(lambda batch: batch.set("age", -3))

    def test_required_field_cannot_be_cleared(self, seeded):
        users, _ = seeded
        records = users.all()

        with track_queries() as tracker:
            with pytest.raises(InvalidRecord):
                records.mutate(lambda batch: batch.set("name", None))

        assert tracker.count() == 0
        assert users.find(1).name == "Maxwell"

    def test_mutation_without_writes(self, seeded):
        users, _ = seeded

        with track_queries() as tracker:
            users.all().mutate(lambda batch: None)

        # Only the SELECT behind all()
        assert tracker.count() == 1

    def test_dirty_member_blocks_batch(self, seeded):
        users, _ = seeded
        records = users.first(3).evaluate()
        member = records[1]
        member.age = 40

        with track_queries() as tracker:
            with pytest.raises(IllegalMutation):
                records.mutate(lambda batch: batch.set("age", 50))

        assert tracker.count() == 0
        assert member.age == 40
        assert member.saved is False
        assert users.find(2).age == 6

    def test_batch_after_member_is_saved(self, seeded):
        users, _ = seeded
        records = users.first(3).evaluate()
        member = records[1]
        member.age = 40
        member.save()

        records.mutate(lambda batch: batch.set("age", 50))

        assert member.age == 50
        assert member.saved is True
        assert [record.age for record in users.first(3).evaluate()] == [50, 50, 50]

    def test_destroyed_collection(self, seeded):
        users, _ = seeded
        records = users.first(1).evaluate()
        records.destroy()

        with pytest.raises(IllegalMutation):
            records.mutate(lambda batch: batch.set("age", 1))
        with pytest.raises(IllegalMutation):
            records.mutate_each(lambda record: None)


class TestMutateEach:
    """Test cases for per-row mutation"""

    def test_only_touched_rows_are_updated(self, seeded):
        users, _ = seeded
        records = users.all()

        def bump_older(record):
            if record.age > 20:
                record.age = record.age + 1

        with track_queries() as tracker:
            records.mutate_each(bump_older)

        assert tracker.count() == 4
        assert all(statement.startswith("UPDATE users SET age=") for statement in tracker.statements())
        assert [record.age for record in users.all()] == [3, 6, 9, 12, 15, 18, 22, 25, 28, 31]

    def test_each_row_gets_its_own_timestamp(self, seeded):
        users, _ = seeded
        records = users.first(3).evaluate()

        records.mutate_each(lambda record: record.set("married", True))

        assert len({record.updated for record in records}) == 3
