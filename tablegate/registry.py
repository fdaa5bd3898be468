"""Thread-safe registry of table metadata."""

from __future__ import annotations

import threading
from typing import Optional

from .types import TableMeta


class ModelRegistry:
    """Holds the TableMeta of every known table, keyed by table name."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tables: dict[str, TableMeta] = {}

    def register_table(self, table_name: str, meta: TableMeta) -> None:
        """Add or replace the metadata for a table."""
        with self._lock:
            self._tables[table_name] = meta

    def get_table(self, table_name: str) -> Optional[TableMeta]:
        """Return the metadata for a table, or None if it is unknown."""
        with self._lock:
            return self._tables.get(table_name)

    def table_names(self) -> list[str]:
        """Return all registered table names in sorted order."""
        with self._lock:
            return sorted(self._tables)

    def table_count(self) -> int:
        """Return the number of registered tables."""
        with self._lock:
            return len(self._tables)

    def total_column_count(self) -> int:
        """Return the number of columns across all registered tables."""
        with self._lock:
            return sum(len(meta.columns) for meta in self._tables.values())

    def clear(self) -> None:
        """Remove every registered table."""
        with self._lock:
            self._tables.clear()


_default = ModelRegistry()


def default_registry() -> ModelRegistry:
    """Return the process-wide registry."""
    return _default