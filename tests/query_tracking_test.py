"""Tests for query tracking and the statements models issue"""

import re

from strata import track_queries
from strata.db_context import get_query_tracker


def test_table_definition(users):
    """The DDL issued when a model is declared"""
    assert users.statements.create_table() == (
        "CREATE TABLE IF NOT EXISTS users (\n"
        "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
        "  name VARCHAR(255) NOT NULL,\n"
        "  account VARCHAR(255) NOT NULL UNIQUE,\n"
        "  age INTEGER,\n"
        "  married BOOLEAN NOT NULL,\n"
        "  created INTEGER NOT NULL,\n"
        "  updated INTEGER NOT NULL\n"
        ");"
    )


def test_insert_statement(users):
    """Creating a record issues a single INSERT with literal values"""
    with track_queries() as tracker:
        users.create(name="O'Brien", account="obrien", married=True)

    (statement,) = tracker.statements()
    assert re.fullmatch(
        r"INSERT INTO users \(name, account, age, married, created, updated\) "
        r"VALUES \('O''Brien', 'obrien', NULL, 1, (\d+), \1\)",
        statement,
    )


def test_find_statement(seeded):
    """find() is a one-row SELECT on the id"""
    users, _ = seeded

    with track_queries() as tracker:
        users.find(2)

    assert tracker.statements() == ["SELECT * FROM users WHERE (id = 2) LIMIT 1"]


def test_tracker_details(seeded):
    """Logged queries carry a timestamp and the calling stack"""
    users, _ = seeded

    with track_queries() as tracker:
        users.first(2).evaluate()
        users.last(2).evaluate()

    assert tracker.count() == 2
    entries = tracker.to_dict()
    assert entries[1]["query"] == "SELECT * FROM users ORDER BY id DESC LIMIT 2"
    assert "timestamp" in entries[0]
    assert "test_tracker_details" in tracker.get_queries()[0].stack_trace

    tracker.clear()
    assert tracker.count() == 0


def test_no_tracking_outside_context(seeded):
    """Nothing is tracked once the context exits"""
    users, _ = seeded

    with track_queries() as tracker:
        users.find(1)

    users.find(2)

    assert tracker.count() == 1
    assert get_query_tracker() is None


def test_nested_tracking_shares_tracker(seeded):
    """An inner track_queries() reuses the outer tracker"""
    users, _ = seeded

    with track_queries() as outer:
        users.find(1)
        with track_queries() as inner:
            users.find(2)
        users.find(3)

    assert inner is outer
    assert outer.count() == 3


def test_active_tracker_inside_block(seeded):
    """The block's tracker is visible through get_query_tracker()"""
    users, _ = seeded

    with track_queries() as tracker:
        assert get_query_tracker() is tracker
        users.find(2)

    assert tracker.statements() == ["SELECT * FROM users WHERE (id = 2) LIMIT 1"]
