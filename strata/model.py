"""Model class"""

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from strata.accessors import (
    FieldAccessor,
    belongs_to_accessor,
    column_accessor,
    has_many_accessor,
    reserved_accessor,
)
from strata.config import get_settings
from strata.database_operations import DatabaseOperations
from strata.db_context import Database
from strata.entities import FieldDefinition, RelationKind, Relationship
from strata.errors import SchemaError, UnknownField
from strata.features import ModelFeature, TimestampFeature
from strata.log import get_logger
from strata.mutation import MutationProxy
from strata.query_builder import Query
from strata.record import Record
from strata.records import RecordCollection
from strata.statements import StatementBuilder
from strata.types import INTEGER, TIMESTAMP, Type

logger = get_logger(__name__)


def _accessor_property(name: str) -> property:
    return property(lambda record: record.get(name), doc=f"Value of `{name}`")


def _default_record_name(table_name: str) -> str:
    if len(table_name) > 1 and table_name.endswith("s"):
        return table_name[:-1]
    return table_name


class Model:
    """
    One table: creates it if needed and produces records, collections and queries.

    Each model opens its own connection unless given a shared Database, and
    builds its own Record subclass carrying a property per column and relation.

    Usage:
        users = Model("users", [
            FieldDefinition(name="name", type=STRING, required=True),
            FieldDefinition(name="account", type=STRING, required=True, unique=True),
            FieldDefinition(name="age", type=INTEGER),
        ])
        posts = Model("posts", [...])
        users.has_many(posts, foreign_key="user_id")
        posts.belongs_to(users, foreign_key="user_id")

        user = users.create(name="Maxwell", account="maxwell-1")
        user.posts.evaluate()
    """

    def __init__(
        self,
        table_name: str,
        fields: Sequence[FieldDefinition | Mapping[str, Any]],
        database: Database | str | Path | None = None,
        record_name: str | None = None,
    ):
        if not table_name or not table_name.isidentifier():
            raise SchemaError(f"Table name `{table_name}` is not a valid identifier")

        self.table_name = table_name
        self.record_name = record_name or _default_record_name(table_name)
        self.fields = self._validate_fields(fields)
        self.definitions: dict[str, FieldDefinition] = {d.name: d for d in self.fields}
        self.field_types: dict[str, Type] = {d.name: d.type for d in self.fields}
        self.column_types: dict[str, Type] = {
            "id": INTEGER,
            **self.field_types,
            "created": TIMESTAMP,
            "updated": TIMESTAMP,
        }
        self.relationships: list[Relationship] = []
        self.features: list[ModelFeature] = [TimestampFeature()]

        if isinstance(database, Database):
            self.database = database
            self._owns_database = False
        else:
            self.database = Database(database or get_settings().db_file)
            self._owns_database = True

        # Composition: Inject dependencies
        self.db_ops = DatabaseOperations(self.database)
        self.statements = StatementBuilder(table_name, self.fields)

        self.accessors: dict[str, FieldAccessor] = {
            "id": reserved_accessor("id", INTEGER),
            **{d.name: column_accessor(d) for d in self.fields},
            "created": reserved_accessor("created", TIMESTAMP),
            "updated": reserved_accessor("updated", TIMESTAMP),
        }
        self.Record: type[Record] = self._build_record_class()

        self._build_table_if_not_exist()

    def _validate_fields(
        self, fields: Sequence[FieldDefinition | Mapping[str, Any]]
    ) -> list[FieldDefinition]:
        definitions: list[FieldDefinition] = []
        seen: set[str] = set()
        for field in fields:
            try:
                definition = (
                    field
                    if isinstance(field, FieldDefinition)
                    else FieldDefinition.model_validate(field)
                )
            except ValidationError as exc:
                raise SchemaError(f"Invalid field in table `{self.table_name}`: {exc}") from exc

            name = definition.name
            if name in seen:
                raise SchemaError(f"Duplicated field `{name}` in table `{self.table_name}`")
            self._check_free_name(name)
            if definition.default is not None and not definition.type.valid_assignment(
                definition.default
            ):
                raise SchemaError(
                    f"Default of field `{name}` does not match type `{definition.type.name}`"
                )
            seen.add(name)
            definitions.append(definition)
        return definitions

    def _check_free_name(self, name: str) -> None:
        # Names must not shadow record or mutation proxy attributes
        if hasattr(Record, name) or hasattr(MutationProxy, name):
            raise SchemaError(f"Name `{name}` is reserved by records in table `{self.table_name}`")

    def _build_record_class(self) -> type[Record]:
        class_name = "".join(part.capitalize() for part in self.record_name.split("_")) + "Record"
        namespace: dict[str, Any] = {"_model": self, "__module__": Record.__module__}
        for name in self.accessors:
            namespace[name] = _accessor_property(name)
        return type(class_name, (Record,), namespace)

    def _build_table_if_not_exist(self) -> None:
        self.db_ops.execute_query(self.statements.create_table())
        logger.info("Ensured table %s exists", self.table_name)

    # Relationships
    def _register_relationship(self, relationship: Relationship, accessor: FieldAccessor) -> Relationship:
        name = relationship.name
        if name in self.accessors:
            raise SchemaError(f"Name `{name}` is already used in table `{self.table_name}`")
        self._check_free_name(name)

        self.relationships.append(relationship)
        self.accessors[name] = accessor
        setattr(self.Record, name, _accessor_property(name))
        logger.debug(
            "Registered %s relation %s.%s -> %s",
            relationship.kind.value,
            self.table_name,
            name,
            relationship.target.table_name,
        )
        return relationship

    def has_many(self, target: "Model", foreign_key: str, name: str | None = None) -> Relationship:
        """Expose `target.where({foreign_key: record.id})` as `record.<target table>`"""
        if foreign_key not in target.field_types:
            raise UnknownField(foreign_key, target.table_name)
        relationship = Relationship(
            name=name or target.table_name,
            kind=RelationKind.HAS_MANY,
            foreign_key=foreign_key,
            target=target,
        )
        return self._register_relationship(relationship, has_many_accessor(relationship))

    def belongs_to(self, target: "Model", foreign_key: str, name: str | None = None) -> Relationship:
        """Expose `target.find(record.<foreign_key>)` as `record.<target record name>`"""
        if foreign_key not in self.field_types:
            raise UnknownField(foreign_key, self.table_name)
        relationship = Relationship(
            name=name or target.record_name,
            kind=RelationKind.BELONGS_TO,
            foreign_key=foreign_key,
            target=target,
        )
        return self._register_relationship(relationship, belongs_to_accessor(relationship))

    # Records
    def new(self, values: Mapping[str, Any] | None = None, /, **fields: Any) -> Record:
        """Build an unsaved record holding field defaults and the given values"""
        row: dict[str, Any] = {"id": None, "created": None, "updated": None}
        for definition in self.fields:
            row[definition.name] = self.accessors[definition.name].validator(definition.default)
        record = self.Record(row, new=True)
        for name, value in {**(values or {}), **fields}.items():
            record.set(name, value)
        return record

    def create(self, values: Mapping[str, Any] | None = None, /, **fields: Any) -> Record:
        """Build a record and save it right away"""
        return self.new(values, **fields).save()

    def find(self, record_id: int | None) -> Record | None:
        """Get the record with the given id, None when there is no such row"""
        if record_id is None:
            return None
        row = self.db_ops.fetch_one(self.query().where({"id": record_id}).first().build())
        return self.Record(row, saved=True) if row is not None else None

    def all(self) -> RecordCollection:
        return self.query().evaluate()

    def collection(self, rows: list[dict[str, Any]], destroyed: bool = False) -> RecordCollection:
        return RecordCollection(self, rows, destroyed)

    # Fluent query methods that return a new query
    def query(self) -> Query:
        return Query(self)

    def where(self, criteria: Mapping[str, Any] | None = None, /, **conditions: Any) -> Query:
        return self.query().where(criteria, **conditions)

    def first(self, count: int = 1) -> Query:
        return self.query().first(count)

    def last(self, count: int = 1) -> Query:
        return self.query().last(count)

    def limit(self, count: int) -> Query:
        return self.query().limit(count)

    # Validation and statements used by records and collections
    def invalid_fields(self, values: Mapping[str, Any]) -> list[str]:
        """Names of the given stored values that would fail a save"""
        invalid = []
        for name, value in values.items():
            definition = self.definitions[name]
            if value is None:
                if definition.required:
                    invalid.append(name)
            elif not definition.type.valid_storage_input(value):
                invalid.append(name)
        return invalid

    def insert_row(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Insert one row and return its id and timestamps"""
        data = dict(values)
        for feature in self.features:
            data = feature.before_create(data)
        record_id = self.db_ops.execute_query(self.statements.insert(data))
        return {"id": record_id, "created": data.get("created"), "updated": data.get("updated")}

    def update_row(self, changes: Mapping[str, Any], record_id: int) -> int:
        """Update one row and return its new `updated` value"""
        data = dict(changes)
        for feature in self.features:
            data = feature.before_update(data)
        self.db_ops.execute_query(self.statements.update(data, record_id))
        return data.get("updated")

    def update_rows(self, changes: Mapping[str, Any], ids: list[int]) -> int:
        """Apply the same changes to many rows and return the shared `updated` value"""
        data = dict(changes)
        for feature in self.features:
            data = feature.before_update(data)
        self.db_ops.execute_query(self.statements.batch_update(data, ids))
        return data.get("updated")

    def delete_row(self, record_id: int) -> None:
        self.db_ops.execute_query(self.statements.delete(record_id))

    def delete_rows(self, ids: list[int]) -> None:
        self.db_ops.execute_query(self.statements.batch_delete(ids))

    # Connection lifecycle
    def close(self) -> None:
        """Close the connection if this model opened it"""
        if self._owns_database:
            self.database.close()

    def __enter__(self) -> "Model":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Model(table_name={self.table_name!r}, fields={[d.name for d in self.fields]!r})"
