"""
Deferred query builder for SELECT statements over one model.

Criteria given to one where() call are combined with AND, separate where()
calls are combined with OR. Nothing runs until evaluate().
"""

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

from strata.entities import Direction
from strata.errors import (
    InvalidLimit,
    TypeMismatch,
    UncomparableType,
    UnknownField,
    UnsupportedOperator,
)
from strata.types import Type

if TYPE_CHECKING:
    from strata.model import Model
    from strata.record import Record
    from strata.records import RecordCollection

OPERATORS = {
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
    "ne": "!=",
}


class Query:
    """
    Mutable, chainable query over one model.

    Usage:
        query = users.where(account="maxwell-2").where({"age": {"gt": 20, "lt": 30}})
        query.build()
        # SELECT * FROM users WHERE (account = 'maxwell-2') OR (age > 20 AND age < 30)
        records = query.last(3).evaluate()
    """

    def __init__(self, model: "Model"):
        self.model = model
        self.table_name = model.table_name
        self.where_groups: list[list[str]] = []
        self.limit_count: int = -1
        self.direction = Direction.FIRST
        self.matches_nothing = False

    def _literal(self, field_name: str, column_type: Type, value: Any) -> str:
        if not column_type.valid_assignment(value):
            raise TypeMismatch(field_name, column_type.name)
        return column_type.format_for_statement(column_type.assign(value))

    def _conditions(self, field_name: str, value: Any) -> list[str]:
        """Render the conditions one criteria entry contributes to its AND group"""
        column_type = self.model.column_types.get(field_name)
        if column_type is None:
            raise UnknownField(field_name, self.table_name)

        if isinstance(value, Mapping):
            if not column_type.comparable:
                raise UncomparableType(field_name, column_type.name)
            conditions = []
            for operator, operand in value.items():
                sql_operator = OPERATORS.get(operator)
                if sql_operator is None:
                    raise UnsupportedOperator(operator)
                if operand is None:
                    if operator != "ne":
                        raise TypeMismatch(field_name, column_type.name)
                    conditions.append(f"{field_name} IS NOT NULL")
                else:
                    literal = self._literal(field_name, column_type, operand)
                    conditions.append(f"{field_name} {sql_operator} {literal}")
            return conditions

        if value is None:
            return [f"{field_name} IS NULL"]
        return [f"{field_name} = {self._literal(field_name, column_type, value)}"]

    def where(self, criteria: Mapping[str, Any] | None = None, /, **conditions: Any) -> "Query":
        """Add one AND group, OR'd with the groups of earlier calls.

        Supports both of the following call styles:
        - where({"account": "maxwell-1", "age": {"gte": 18}})
        - where(account="maxwell-1", age={"gte": 18})
        """
        merged = {**(criteria or {}), **conditions}
        group: list[str] = []
        for field_name, value in merged.items():
            group.extend(self._conditions(field_name, value))
        if group:
            self.where_groups.append(group)
        return self

    @staticmethod
    def _check_count(count: Any) -> int:
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            raise InvalidLimit(count)
        return count

    def limit(self, count: int) -> "Query":
        """Take at most count rows from the start"""
        self.limit_count = self._check_count(count)
        self.direction = Direction.FIRST
        return self

    def first(self, count: int = 1) -> "Query":
        """Take the count lowest-id rows"""
        return self.limit(count)

    def last(self, count: int = 1) -> "Query":
        """Take the count highest-id rows, still returned in ascending id order"""
        self.limit_count = self._check_count(count)
        self.direction = Direction.LAST
        return self

    def none(self) -> "Query":
        """Match no rows, whatever conditions are added later"""
        self.matches_nothing = True
        return self

    def clear(self) -> "Query":
        """Reset every accumulated condition and limit"""
        self.where_groups = []
        self.matches_nothing = False
        self.limit_count = -1
        self.direction = Direction.FIRST
        return self

    def build(self) -> str:
        """Build the final SQL query"""
        query_parts = [f"SELECT * FROM {self.table_name}"]

        if self.matches_nothing:
            query_parts.append("WHERE 0 = 1")
        elif self.where_groups:
            groups = " OR ".join(f"({' AND '.join(group)})" for group in self.where_groups)
            query_parts.append(f"WHERE {groups}")

        if self.limit_count > 0:
            if self.direction is Direction.LAST:
                query_parts.append(f"ORDER BY id DESC LIMIT {self.limit_count}")
            else:
                query_parts.append(f"LIMIT {self.limit_count}")

        return " ".join(query_parts)

    def to_sql(self) -> str:
        """Return the SQL query string without running it"""
        return self.build()

    def evaluate(self) -> "RecordCollection":
        """Run the query and wrap the rows in ascending id order"""
        rows = self.model.db_ops.fetch_all(self.build())
        if self.direction is Direction.LAST:
            rows.reverse()
        return self.model.collection(rows)

    def __iter__(self) -> Iterator["Record"]:
        return iter(self.evaluate())

    def __str__(self) -> str:
        return f"Query: {self.build()}"

    def __repr__(self) -> str:
        return f"Query(table={self.table_name!r}, sql={self.build()!r})"
