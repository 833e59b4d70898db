"""Strata: a small ORM over SQLite with lazily evaluated queries"""

from strata.db_context import Database, track_queries
from strata.entities import FieldDefinition
from strata.errors import (
    DuplicateEnumKey,
    EnumTransitionBoundary,
    IllegalDestroy,
    IllegalMutation,
    InvalidLimit,
    InvalidRecord,
    ReadOnlyField,
    ReadOnlyRecord,
    SchemaError,
    StrataError,
    TypeMismatch,
    UncomparableType,
    UnknownField,
    UnsupportedOperator,
)
from strata.model import Model
from strata.query_builder import Query
from strata.record import Record
from strata.records import RecordCollection
from strata.types import BOOLEAN, INTEGER, STRING, TEXT, TIMESTAMP, EnumState, EnumType, Types

__all__ = [
    "Model",
    "FieldDefinition",
    "Record",
    "RecordCollection",
    "Query",
    "Database",
    "track_queries",
    "Types",
    "INTEGER",
    "STRING",
    "TEXT",
    "TIMESTAMP",
    "BOOLEAN",
    "EnumType",
    "EnumState",
    "StrataError",
    "SchemaError",
    "TypeMismatch",
    "UnknownField",
    "ReadOnlyField",
    "ReadOnlyRecord",
    "InvalidRecord",
    "IllegalMutation",
    "IllegalDestroy",
    "UncomparableType",
    "UnsupportedOperator",
    "InvalidLimit",
    "DuplicateEnumKey",
    "EnumTransitionBoundary",
]
