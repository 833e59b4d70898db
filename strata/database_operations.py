from typing import Any

from strata.db_context import Database, log_query


class DatabaseOperations:
    """Composition class for database operations"""

    def __init__(self, database: Database):
        self.database = database

    def fetch_all(self, query: str) -> list[dict[str, Any]]:
        """Execute query and fetch all rows"""
        log_query(query)
        rows = self.database.connection.execute(query).fetchall()
        return [dict(row) for row in rows]

    def fetch_one(self, query: str) -> dict[str, Any] | None:
        """Execute a query and fetch one row"""
        log_query(query)
        row = self.database.connection.execute(query).fetchone()
        return dict(row) if row is not None else None

    def execute_query(self, query: str) -> int:
        """Execute a statement and return the last inserted row id"""
        log_query(query)
        cursor = self.database.connection.execute(query)
        return cursor.lastrowid
