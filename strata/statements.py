"""
SQL text for the statements a model issues.

Values are rendered inline as literals by the column's type, so the builder
only ever sees stored representations (already passed through Type.assign).
"""

from collections.abc import Iterable, Mapping
from typing import Any

from strata.entities import FieldDefinition
from strata.types import INTEGER, TIMESTAMP, Type


class StatementBuilder:
    """
    Builds DDL and DML for one table.

    Usage:
        builder = StatementBuilder("users", fields)
        builder.delete(3)  # "DELETE FROM users WHERE id = 3"
    """

    def __init__(self, table_name: str, fields: list[FieldDefinition]):
        self.table_name = table_name
        self.fields = fields
        self.column_types: dict[str, Type] = {
            "id": INTEGER,
            **{definition.name: definition.type for definition in fields},
            "created": TIMESTAMP,
            "updated": TIMESTAMP,
        }

    def _literal(self, column: str, value: Any) -> str:
        return self.column_types[column].format_for_statement(value)

    @staticmethod
    def _id_list(ids: Iterable[int]) -> str:
        return ",".join(str(record_id) for record_id in ids)

    def create_table(self) -> str:
        """CREATE TABLE IF NOT EXISTS with the implicit id/created/updated columns"""
        columns = ["id INTEGER PRIMARY KEY AUTOINCREMENT"]
        for definition in self.fields:
            not_null = " NOT NULL" if definition.required else ""
            unique = " UNIQUE" if definition.unique else ""
            columns.append(f"{definition.name} {definition.type.sql_type}{not_null}{unique}")
        columns.append("created INTEGER NOT NULL")
        columns.append("updated INTEGER NOT NULL")
        body = ",\n  ".join(columns)
        return f"CREATE TABLE IF NOT EXISTS {self.table_name} (\n  {body}\n);"

    def insert(self, values: Mapping[str, Any]) -> str:
        """INSERT of every declared column plus created and updated"""
        columns = [definition.name for definition in self.fields] + ["created", "updated"]
        literals = ", ".join(self._literal(column, values.get(column)) for column in columns)
        return f"INSERT INTO {self.table_name} ({', '.join(columns)}) VALUES ({literals})"

    def _set_clause(self, values: Mapping[str, Any]) -> str:
        return ", ".join(
            f"{column}={self._literal(column, value)}" for column, value in values.items()
        )

    def update(self, values: Mapping[str, Any], record_id: int) -> str:
        return (
            f"UPDATE {self.table_name} SET {self._set_clause(values)} "
            f"WHERE id = {record_id}"
        )

    def batch_update(self, values: Mapping[str, Any], ids: Iterable[int]) -> str:
        return (
            f"UPDATE {self.table_name} SET {self._set_clause(values)} "
            f"WHERE id IN ({self._id_list(ids)})"
        )

    def delete(self, record_id: int) -> str:
        return f"DELETE FROM {self.table_name} WHERE id = {record_id}"

    def batch_delete(self, ids: Iterable[int]) -> str:
        return f"DELETE FROM {self.table_name} WHERE id IN ({self._id_list(ids)})"
