"""Discovery of tables, columns and keys from a live database."""

from __future__ import annotations

import abc
import logging
from dataclasses import replace
from typing import Any, Optional

from .query import Executor
from .registry import ModelRegistry, default_registry
from .types import ColumnMeta, ForeignKeyMeta, TableMeta

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    """Render a column value as text; NULL becomes the empty string."""
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def _optional_text(value: Any) -> Optional[str]:
    return None if value is None else _text(value)


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


class SchemaIntrospector(abc.ABC):
    """Reads a database's catalogue and fills a ModelRegistry with it.

    Subclasses know how one database engine describes its schema.
    """

    @abc.abstractmethod
    async def discover_tables(self, db: Executor, schema: str) -> list[str]:
        """Return the names of the base tables in ``schema``."""

    @abc.abstractmethod
    async def discover_all_columns(
        self, db: Executor, schema: str
    ) -> dict[str, list[ColumnMeta]]:
        """Return the columns of every table, keyed by table name."""

    @abc.abstractmethod
    async def discover_all_primary_keys(
        self, db: Executor, schema: str
    ) -> dict[str, list[str]]:
        """Return the primary-key column names of every table, in key order."""

    @abc.abstractmethod
    async def discover_all_foreign_keys(
        self, db: Executor, schema: str
    ) -> dict[str, list[ForeignKeyMeta]]:
        """Return the foreign keys of every table, keyed by table name."""

    async def introspect_schema(
        self,
        db: Executor,
        schema: str,
        registry: Optional[ModelRegistry] = None,
    ) -> list[TableMeta]:
        """Discover every table of ``schema`` and register it.

        Returns the registered table metadata in discovery order.
        """
        if registry is None:
            registry = default_registry()

        tables = await self.discover_tables(db, schema)
        all_columns = await self.discover_all_columns(db, schema)
        all_primary_keys = await self.discover_all_primary_keys(db, schema)
        all_foreign_keys = await self.discover_all_foreign_keys(db, schema)

        registered: list[TableMeta] = []
        for table_name in tables:
            primary_keys = list(all_primary_keys.get(table_name, []))
            pk_names = set(primary_keys)
            columns = [
                replace(col, is_primary_key=True) if col.name in pk_names else col
                for col in all_columns.get(table_name, [])
            ]
            meta = TableMeta(
                name=table_name,
                schema=schema,
                columns=columns,
                primary_keys=primary_keys,
                foreign_keys=list(all_foreign_keys.get(table_name, [])),
            )
            registry.register_table(table_name, meta)
            registered.append(meta)

        logger.info(
            "Schema introspection complete: %d tables, %d columns",
            len(registered),
            sum(len(meta.columns) for meta in registered),
        )
        return registered