"""Mass-assignment protection: strip protected fields from incoming payloads."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_BLOCKED: frozenset[str] = frozenset(
    {
        "id",
        "created_at",
        "updated_at",
        "created_by",
        "modified_by",
        "deleted_at",
        "deleted_by",
    }
)


class FieldGuard:
    """Keeps per-table blocklists on top of a fixed set of default blocked fields.

    Safe to share between threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._table_blocked: dict[str, set[str]] = {}

    def sanitize(self, table: str, data: Any) -> Any:
        """Return a copy of ``data`` without the fields blocked for ``table``.

        Anything that is not a mapping is returned unchanged.
        """
        if not isinstance(data, Mapping):
            return data
        blocked = self.blocked_fields(table)
        result = {}
        for key, value in data.items():
            if key in blocked:
                logger.debug(
                    "FieldGuard: stripped blocked field '%s' from table '%s'",
                    key,
                    table,
                )
            else:
                result[key] = value
        return result

    def add_blocked_field(self, table: str, field: str) -> None:
        """Block one more field for a table."""
        with self._lock:
            self._table_blocked.setdefault(table, set()).add(field)
        logger.debug(
            "FieldGuard: added blocked field '%s' for table '%s'", field, table
        )

    def set_blocked_fields(self, table: str, fields: Iterable[str]) -> None:
        """Replace the table-specific blocklist for a table."""
        new_fields = set(fields)
        with self._lock:
            self._table_blocked[table] = new_fields
        logger.debug(
            "FieldGuard: set %d blocked field(s) for table '%s'",
            len(new_fields),
            table,
        )

    def blocked_fields(self, table: str) -> set[str]:
        """Return the defaults together with the table's own blocked fields."""
        with self._lock:
            return set(DEFAULT_BLOCKED) | self._table_blocked.get(table, set())

    def reset(self) -> None:
        """Drop every per-table blocklist, leaving only the defaults."""
        with self._lock:
            self._table_blocked.clear()
        logger.debug("FieldGuard: reset all per-table overrides")