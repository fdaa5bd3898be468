"""Turn database rows into JSON-ready values using table metadata."""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from .types import ColumnMeta, SqlType, TableMeta

_TRUE_WORDS = frozenset({"t", "true", "1", "y", "yes", "on"})


def _fields(row: Any) -> Iterable[tuple[str, Any]]:
    """Yield (column name, value) pairs from a mapping, a keyed row or pairs."""
    if hasattr(row, "items"):
        return row.items()
    if hasattr(row, "keys"):
        return ((key, row[key]) for key in row.keys())
    return iter(row)


def _as_text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _as_int(value: Any) -> int:
    if isinstance(value, (int, float)):
        return int(value)
    return int(_as_text(value).strip())


def _as_float(value: Any) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    return float(_as_text(value).strip())


def _as_bool(value: Any) -> bool:
    if isinstance(value, (bool, int, float)):
        return bool(value)
    return _as_text(value).strip().lower() in _TRUE_WORDS


def _as_json(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return value
    raw = _as_text(value)
    try:
        return json.loads(raw)
    except ValueError:
        return raw


_CONVERTERS = {
    SqlType.INTEGER: _as_int,
    SqlType.FLOAT: _as_float,
    SqlType.DECIMAL: _as_float,
    SqlType.BOOLEAN: _as_bool,
    SqlType.JSON: _as_json,
}


def _convert(value: Any, col: ColumnMeta | None) -> Any:
    if value is None:
        return None
    if col is None:
        return _as_text(value)
    return _CONVERTERS.get(col.sql_type, _as_text)(value)


def serialize_row(row: Any, meta: TableMeta) -> dict[str, Any]:
    """Convert one row, typing each value by its column's SQL type.

    Columns unknown to ``meta`` come out as strings; NULLs as None.
    """
    return {name: _convert(value, meta.get_column(name)) for name, value in _fields(row)}


def serialize_result(rows: Iterable[Any], meta: TableMeta) -> list[dict[str, Any]]:
    """Convert every row of a result."""
    return [serialize_row(row, meta) for row in rows]


def serialize_row_raw(row: Any) -> dict[str, Any]:
    """Convert one row with every non-NULL value as a string."""
    return {
        name: None if value is None else _as_text(value)
        for name, value in _fields(row)
    }