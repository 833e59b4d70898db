from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

from strata.types import Type

# Columns every table carries in addition to its declared fields
RESERVED_FIELDS = ("id", "created", "updated")


class FieldDefinition(BaseModel):
    """Declared column of a model.

    Usage:
        FieldDefinition(name="account", type=STRING, required=True, unique=True)
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: str = Field(description="Column name")
    type: Type = Field(description="Column type from strata.types")
    required: bool = Field(default=False, description="Rendered as NOT NULL")
    unique: bool = Field(default=False, description="Rendered as UNIQUE")
    default: Any = Field(default=None, description="Value given to new records")

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not value.isidentifier():
            raise ValueError(f"Field name `{value}` is not a valid identifier")
        if value in RESERVED_FIELDS:
            raise ValueError(f"Field name `{value}` is reserved")
        return value


class RelationKind(str, Enum):
    HAS_MANY = "has_many"
    BELONGS_TO = "belongs_to"


class Relationship(BaseModel):
    """Relation metadata registered through has_many / belongs_to."""

    model_config: ClassVar[ConfigDict] = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: str
    kind: RelationKind
    foreign_key: str
    target: Any = Field(description="Model the relation resolves against")


# Which end of the table a limited query takes rows from
class Direction(str, Enum):
    FIRST = "first"
    LAST = "last"
