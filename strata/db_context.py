import atexit
import sqlite3
import traceback
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from strata.log import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class QueryLog:
    """One statement seen by a tracker, with where it was issued from"""

    query: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    stack_trace: str | None = None


class QueryTracker:
    """Statements issued while a track_queries() block is active, in order"""

    def __init__(self):
        self.queries: list[QueryLog] = []

    def record(self, query: str, stack_trace: str | None = None) -> None:
        self.queries.append(QueryLog(query, stack_trace=stack_trace))

    def get_queries(self) -> list[QueryLog]:
        return list(self.queries)

    def statements(self) -> list[str]:
        """SQL text of every tracked statement"""
        return [entry.query for entry in self.queries]

    def clear(self) -> None:
        self.queries.clear()

    def count(self) -> int:
        return len(self.queries)

    def to_dict(self) -> list[dict[str, Any]]:
        """Tracked statements as JSON-friendly dicts"""
        return [
            {
                "query": entry.query,
                "timestamp": entry.timestamp.isoformat(),
                "stack_trace": entry.stack_trace,
            }
            for entry in self.queries
        ]


_query_tracker: ContextVar[QueryTracker | None] = ContextVar("strata_query_tracker", default=None)


def get_query_tracker() -> QueryTracker | None:
    """Tracker of the innermost active track_queries() block, if any"""
    return _query_tracker.get()


def log_query(query: str) -> None:
    """Log a statement to the module logger and the current tracker if any"""
    logger.debug("SQL: %s", query)
    tracker = _query_tracker.get()
    if tracker is not None:
        # Drop this frame and the DatabaseOperations method calling it
        stack = traceback.extract_stack()[:-2]
        tracker.record(query, "".join(traceback.format_list(stack)))


@contextmanager
def track_queries() -> Iterator[QueryTracker]:
    """Collect every statement issued inside the block.

    A nested block shares the tracker of the outer one.

    Usage:
        with track_queries() as tracker:
            users.find(1)
            assert tracker.statements() == ["SELECT * FROM users WHERE (id = 1) LIMIT 1"]
    """
    current = _query_tracker.get()
    if current is not None:
        yield current
        return

    tracker = QueryTracker()
    token = _query_tracker.set(tracker)
    try:
        yield tracker
    finally:
        _query_tracker.reset(token)


class Database:
    """
    One long-lived SQLite connection.

    The connection runs in autocommit mode, so every statement is its own
    atomic unit. It is closed at interpreter exit unless closed earlier.
    """

    def __init__(self, path: str | Path):
        self.path = str(path)
        self._connection: sqlite3.Connection | None = sqlite3.connect(
            self.path, isolation_level=None
        )
        self._connection.row_factory = sqlite3.Row
        atexit.register(self.close)
        logger.debug("Opened database %s", self.path)

    @property
    def closed(self) -> bool:
        return self._connection is None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the open connection"""
        if self._connection is None:
            raise ValueError(f"Database `{self.path}` has been closed")
        return self._connection

    def close(self) -> None:
        """Close the connection; closing twice is a no-op"""
        if self._connection is None:
            return
        self._connection.close()
        self._connection = None
        atexit.unregister(self.close)
        logger.debug("Closed database %s", self.path)

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Database(path={self.path!r}, closed={self.closed})"
