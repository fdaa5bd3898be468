"""Schema discovery for SQLite through sqlite_master and PRAGMA statements."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .introspect import SchemaIntrospector, _optional_text, _text
from .query import Executor
from .type_mapper import map_sqlite_type
from .types import ColumnMeta, ForeignKeyMeta

logger = logging.getLogger(__name__)

TABLES_SQL = (
    "SELECT name FROM sqlite_master "
    "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' "
    "ORDER BY name"
)

_EXTRA_NAME_CHARS = frozenset("_.")


def is_valid_table_name(name: str) -> bool:
    """Tell whether a table name is safe to embed in a PRAGMA statement.

    Only ASCII letters, digits, underscores and dots are allowed.
    """
    return bool(name) and all(
        (ch.isascii() and ch.isalnum()) or ch in _EXTRA_NAME_CHARS for ch in name
    )


def _column(row: Mapping[str, Any]) -> ColumnMeta:
    raw_type = _text(row["type"])
    mapping = map_sqlite_type(raw_type)
    is_primary_key = int(row["pk"]) > 0
    return ColumnMeta(
        name=_text(row["name"]),
        raw_type=raw_type,
        sql_type=mapping.sql_type,
        json_type=mapping.json_type,
        is_nullable=int(row["notnull"]) == 0,
        is_primary_key=is_primary_key,
        # INTEGER PRIMARY KEY aliases the rowid and so increments on its own
        is_auto_increment=is_primary_key and raw_type.upper() == "INTEGER",
        default_value=_optional_text(row.get("dflt_value")),
        ordinal_position=int(row["cid"]),
    )


class SQLiteIntrospector(SchemaIntrospector):
    """Reads table metadata from a SQLite database.

    SQLite has no schemas; the ``schema`` argument is accepted and ignored.
    """

    async def discover_tables(self, db: Executor, schema: str) -> list[str]:
        result = await db.execute(TABLES_SQL, [])
        return [_text(row["name"]) for row in result]

    async def _valid_tables(self, db: Executor, schema: str) -> list[str]:
        tables = []
        for table_name in await self.discover_tables(db, schema):
            if is_valid_table_name(table_name):
                tables.append(table_name)
            else:
                logger.warning("Skipping table with invalid name: %s", table_name)
        return tables

    async def discover_all_columns(
        self, db: Executor, schema: str
    ) -> dict[str, list[ColumnMeta]]:
        columns: dict[str, list[ColumnMeta]] = {}
        for table_name in await self._valid_tables(db, schema):
            result = await db.execute(f"PRAGMA table_info('{table_name}')", [])
            columns[table_name] = [_column(row) for row in result]
        return columns

    async def discover_all_primary_keys(
        self, db: Executor, schema: str
    ) -> dict[str, list[str]]:
        keys: dict[str, list[str]] = {}
        for table_name in await self._valid_tables(db, schema):
            result = await db.execute(f"PRAGMA table_info('{table_name}')", [])
            # pk holds each column's position within a composite key
            ranked = sorted(
                (int(row["pk"]), _text(row["name"]))
                for row in result
                if int(row["pk"]) > 0
            )
            if ranked:
                keys[table_name] = [name for _, name in ranked]
        return keys

    async def discover_all_foreign_keys(
        self, db: Executor, schema: str
    ) -> dict[str, list[ForeignKeyMeta]]:
        keys: dict[str, list[ForeignKeyMeta]] = {}
        for table_name in await self._valid_tables(db, schema):
            result = await db.execute(f"PRAGMA foreign_key_list('{table_name}')", [])
            foreign_keys = [
                ForeignKeyMeta(
                    column_name=_text(row["from"]),
                    referenced_table=_text(row["table"]),
                    referenced_column=_text(row["to"]),
                    constraint_name=f"fk_{int(row['id'])}",
                )
                for row in result
            ]
            if foreign_keys:
                keys[table_name] = foreign_keys
        return keys