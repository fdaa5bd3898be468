"""Schema discovery for MySQL through INFORMATION_SCHEMA."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .introspect import SchemaIntrospector, _optional_int, _optional_text, _text
from .query import Executor
from .type_mapper import map_mysql_type
from .types import ColumnMeta, ForeignKeyMeta

TABLES_SQL = (
    "SELECT TABLE_NAME FROM INFORMATION_SCHEMA.TABLES "
    "WHERE TABLE_SCHEMA = ? AND TABLE_TYPE = 'BASE TABLE' "
    "ORDER BY TABLE_NAME"
)

COLUMNS_SQL = (
    "SELECT TABLE_NAME, COLUMN_NAME, ORDINAL_POSITION, "
    "COLUMN_DEFAULT, IS_NULLABLE, DATA_TYPE, "
    "CHARACTER_MAXIMUM_LENGTH, NUMERIC_PRECISION, "
    "NUMERIC_SCALE, COLUMN_TYPE, EXTRA "
    "FROM INFORMATION_SCHEMA.COLUMNS "
    "WHERE TABLE_SCHEMA = ? "
    "ORDER BY TABLE_NAME, ORDINAL_POSITION"
)

PRIMARY_KEYS_SQL = (
    "SELECT TABLE_NAME, COLUMN_NAME "
    "FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE "
    "WHERE TABLE_SCHEMA = ? AND CONSTRAINT_NAME = 'PRIMARY' "
    "ORDER BY TABLE_NAME, ORDINAL_POSITION"
)

FOREIGN_KEYS_SQL = (
    "SELECT TABLE_NAME, COLUMN_NAME, CONSTRAINT_NAME, "
    "REFERENCED_TABLE_NAME, REFERENCED_COLUMN_NAME "
    "FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE "
    "WHERE TABLE_SCHEMA = ? AND REFERENCED_TABLE_NAME IS NOT NULL "
    "ORDER BY TABLE_NAME, CONSTRAINT_NAME"
)


def _column(row: Mapping[str, Any]) -> ColumnMeta:
    column_type = _text(row["COLUMN_TYPE"])
    mapping = map_mysql_type(_text(row["DATA_TYPE"]), column_type)
    return ColumnMeta(
        name=_text(row["COLUMN_NAME"]),
        raw_type=column_type,
        sql_type=mapping.sql_type,
        json_type=mapping.json_type,
        is_nullable=_text(row["IS_NULLABLE"]) == "YES",
        is_auto_increment="auto_increment" in _text(row.get("EXTRA")),
        default_value=_optional_text(row.get("COLUMN_DEFAULT")),
        max_length=_optional_int(row.get("CHARACTER_MAXIMUM_LENGTH")),
        precision=_optional_int(row.get("NUMERIC_PRECISION")),
        scale=_optional_int(row.get("NUMERIC_SCALE")),
        ordinal_position=int(row["ORDINAL_POSITION"]),
    )


class MySQLIntrospector(SchemaIntrospector):
    """Reads table metadata from MySQL's INFORMATION_SCHEMA."""

    async def discover_tables(self, db: Executor, schema: str) -> list[str]:
        result = await db.execute(TABLES_SQL, [schema])
        return [_text(row["TABLE_NAME"]) for row in result]

    async def discover_all_columns(
        self, db: Executor, schema: str
    ) -> dict[str, list[ColumnMeta]]:
        result = await db.execute(COLUMNS_SQL, [schema])
        columns: dict[str, list[ColumnMeta]] = {}
        for row in result:
            columns.setdefault(_text(row["TABLE_NAME"]), []).append(_column(row))
        return columns

    async def discover_all_primary_keys(
        self, db: Executor, schema: str
    ) -> dict[str, list[str]]:
        result = await db.execute(PRIMARY_KEYS_SQL, [schema])
        keys: dict[str, list[str]] = {}
        for row in result:
            keys.setdefault(_text(row["TABLE_NAME"]), []).append(
                _text(row["COLUMN_NAME"])
            )
        return keys

    async def discover_all_foreign_keys(
        self, db: Executor, schema: str
    ) -> dict[str, list[ForeignKeyMeta]]:
        result = await db.execute(FOREIGN_KEYS_SQL, [schema])
        keys: dict[str, list[ForeignKeyMeta]] = {}
        for row in result:
            keys.setdefault(_text(row["TABLE_NAME"]), []).append(
                ForeignKeyMeta(
                    column_name=_text(row["COLUMN_NAME"]),
                    referenced_table=_text(row["REFERENCED_TABLE_NAME"]),
                    referenced_column=_text(row["REFERENCED_COLUMN_NAME"]),
                    constraint_name=_text(row["CONSTRAINT_NAME"]),
                )
            )
        return keys