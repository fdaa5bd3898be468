"""Validation of JSON request bodies against table metadata."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from typing import Any, Optional

from .types import ColumnMeta, JsonType, TableMeta

DEFAULT_AUTO_FIELDS: tuple[str, ...] = (
    "id",
    "code",
    "created_at",
    "updated_at",
    "created_by",
    "modified_by",
    "deleted_at",
    "deleted_by",
)


@dataclass(frozen=True)
class ValidationIssue:
    """A single problem found in a request body."""

    field: str
    code: str
    message: str


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_type_compatible(value: Any, col: ColumnMeta) -> bool:
    if value is None and col.is_nullable:
        return True
    checks = {
        JsonType.NUMBER: _is_number,
        JsonType.STRING: lambda v: isinstance(v, str),
        JsonType.BOOLEAN: lambda v: isinstance(v, bool),
        JsonType.OBJECT: lambda v: isinstance(v, Mapping),
        JsonType.ARRAY: lambda v: isinstance(v, list),
    }
    check = checks.get(col.json_type)
    return True if check is None else check(value)


def _exceeds_max_length(value: Any, col: ColumnMeta) -> bool:
    if col.max_length is None or not isinstance(value, str):
        return False
    return len(value.encode("utf-8")) > col.max_length


def _value_issues(value: Any, col: ColumnMeta) -> list[ValidationIssue]:
    issues = []
    if not _is_type_compatible(value, col):
        issues.append(
            ValidationIssue(
                col.name,
                "INVALID_TYPE",
                f"Field '{col.name}' expects type {col.raw_type}",
            )
        )
    if _exceeds_max_length(value, col):
        issues.append(
            ValidationIssue(
                col.name,
                "TOO_LONG",
                f"Field '{col.name}' exceeds max length {col.max_length}",
            )
        )
    return issues


def _unknown_field(key: str, meta: TableMeta) -> ValidationIssue:
    return ValidationIssue(
        key,
        "UNKNOWN_FIELD",
        f"Field '{key}' does not exist in table '{meta.name}'",
    )


def validate_create(
    body: Optional[Mapping[str, Any]],
    meta: TableMeta,
    auto_fields: Iterable[str] = DEFAULT_AUTO_FIELDS,
) -> list[ValidationIssue]:
    """Check a body for an INSERT: required fields, types, lengths, unknown keys."""
    body = body or {}
    skipped = set(auto_fields)
    issues: list[ValidationIssue] = []

    for col in meta.columns:
        if col.is_auto_increment or col.name in skipped:
            continue
        value = body.get(col.name)
        missing = value is None
        if not col.is_nullable and col.default_value is None and missing:
            issues.append(
                ValidationIssue(
                    col.name, "REQUIRED", f"Field '{col.name}' is required"
                )
            )
            continue
        if missing:
            continue
        issues.extend(_value_issues(value, col))

    issues.extend(
        _unknown_field(key, meta) for key in sorted(body) if not meta.has_column(key)
    )
    return issues


def validate_update(
    body: Optional[Mapping[str, Any]], meta: TableMeta
) -> list[ValidationIssue]:
    """Check a body for an UPDATE: unknown keys, primary keys, types, lengths."""
    body = body or {}
    issues: list[ValidationIssue] = []

    for key in sorted(body):
        col = meta.get_column(key)
        if col is None:
            issues.append(_unknown_field(key, meta))
            continue
        if col.is_primary_key:
            issues.append(
                ValidationIssue(
                    col.name,
                    "IMMUTABLE",
                    f"Primary key field '{col.name}' cannot be updated",
                )
            )
            continue
        value = body[key]
        if value is None:
            continue
        issues.extend(_value_issues(value, col))

    return issues


def errors_to_json(errors: Iterable[ValidationIssue]) -> list[dict[str, str]]:
    """Turn issues into a JSON-ready list of {field, code, message} objects."""
    return [asdict(error) for error in errors]