"""
Tests for evaluating queries against seeded users and posts.
"""

from strata.records import RecordCollection


class TestEvaluate:
    """Test cases for running queries"""

    def test_all(self, seeded):
        users, posts = seeded

        assert len(users.all()) == 10
        assert len(posts.all()) == 50

    def test_evaluate_returns_a_collection(self, seeded):
        users, _ = seeded

        assert isinstance(users.where(age=3).evaluate(), RecordCollection)

    def test_find(self, seeded):
        users, _ = seeded

        assert users.find(5).id == 5
        assert users.find(999) is None
        assert users.find(None) is None

    def test_find_returns_a_saved_record(self, seeded):
        users, _ = seeded
        record = users.find(5)

        assert isinstance(record, users.Record)
        assert record.saved is True
        assert record.persisted is True
        assert record.account == "maxwell-5"
        assert record.age == 15

    def test_find_reads_one_row(self, seeded):
        users, _ = seeded
        row = users.db_ops.fetch_one("SELECT * FROM users WHERE (id = 5) LIMIT 1")

        assert row["account"] == "maxwell-5"
        assert users.db_ops.fetch_one("SELECT * FROM users WHERE (id = 999) LIMIT 1") is None

    def test_first(self, seeded):
        users, _ = seeded
        records = users.first(3).evaluate()

        assert len(records) == 3
        assert records[0].id == 1

    def test_last_returns_highest_ids_in_ascending_order(self, seeded):
        users, _ = seeded
        records = users.last(4).evaluate()

        assert [record.id for record in records] == [7, 8, 9, 10]

    def test_where(self, seeded):
        users, _ = seeded
        records = users.where({"account": "maxwell-7"}).evaluate()

        assert len(records) == 1
        assert records[0].id == 7

    def test_where_or_chain(self, seeded):
        users, _ = seeded
        records = (
            users.where({"account": "maxwell-2"})
            .where({"account": "maxwell-3"})
            .where({"account": "maxwell-8"})
            .evaluate()
        )

        assert [record.id for record in records] == [2, 3, 8]

    def test_where_and_chain(self, seeded):
        _, posts = seeded

        assert [post.id for post in posts.where({"user_id": 1, "id": 48}).evaluate()] == [48]
        assert len(posts.where({"user_id": 1, "id": 47}).evaluate()) == 0

    def test_comparison(self, seeded):
        users, _ = seeded
        records = users.where({"age": {"gt": 10, "lt": 20}}).evaluate()

        assert [record.age for record in records] == [12, 15, 18]

    def test_where_with_limit(self, seeded):
        _, posts = seeded
        records = posts.where({"user_id": 1}).limit(3).evaluate()

        assert [post.id for post in records] == [4, 8, 12]

    def test_last_with_where(self, seeded):
        _, posts = seeded
        records = posts.last(4).where({"user_id": 2}).evaluate()

        assert [post.id for post in records] == [37, 41, 45, 49]

    def test_last_across_or_groups(self, seeded):
        _, posts = seeded
        records = posts.where({"user_id": 4}).last(7).where({"user_id": 2}).evaluate()

        assert [post.id for post in records] == [37, 39, 41, 43, 45, 47, 49]
        assert [post.user_id for post in records] == [2, 4, 2, 4, 2, 4, 2]

    def test_iterating_a_query_evaluates_it(self, seeded):
        users, _ = seeded

        assert [user.id for user in users.where(age={"lte": 6})] == [1, 2]

    def test_empty_table(self, users):
        assert len(users.all()) == 0
        assert len(users.last(3).evaluate()) == 0
