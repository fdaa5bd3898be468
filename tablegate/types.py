"""Schema metadata: SQL and JSON type tags, columns, foreign keys and tables."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional

GENERIC_FIELDS = frozenset(
    {
        "id",
        "code",
        "created_at",
        "updated_at",
        "created_by",
        "modified_by",
        "deleted_at",
        "deleted_by",
        "status",
    }
)


class SqlType(enum.Enum):
    """Normalised SQL column type."""

    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    STRING = "string"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    DATE = "date"
    TIME = "time"
    BINARY = "binary"
    JSON = "json"
    UUID = "uuid"
    UNKNOWN = "unknown"


class JsonType(enum.Enum):
    """JSON type a column's values are expected to take."""

    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    NULL = "null"
    OBJECT = "object"
    ARRAY = "array"


@dataclass
class ColumnMeta:
    """Description of a single table column."""

    name: str
    raw_type: str = ""
    sql_type: SqlType = SqlType.UNKNOWN
    json_type: JsonType = JsonType.STRING
    is_nullable: bool = True
    is_primary_key: bool = False
    is_auto_increment: bool = False
    default_value: Optional[str] = None
    max_length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    ordinal_position: int = 0


@dataclass
class ForeignKeyMeta:
    """A foreign key from one column to a column of another table."""

    column_name: str
    referenced_table: str
    referenced_column: str
    constraint_name: str = ""


@dataclass
class TableMeta:
    """Description of a table: its columns, primary keys and foreign keys."""

    name: str
    schema: str = ""
    columns: list[ColumnMeta] = field(default_factory=list)
    primary_keys: list[str] = field(default_factory=list)
    foreign_keys: list[ForeignKeyMeta] = field(default_factory=list)

    def get_column(self, name: str) -> Optional[ColumnMeta]:
        """Return the first column with this name, or None."""
        return next((col for col in self.columns if col.name == name), None)

    def has_column(self, name: str) -> bool:
        """Tell whether the table has a column with this name."""
        return self.get_column(name) is not None

    def is_generic_field(self, name: str) -> bool:
        """Tell whether the name is one of the framework-managed fields."""
        return name in GENERIC_FIELDS