"""Audit-trail fields for payloads headed to INSERT or UPDATE statements.

The plain functions always set the fields; the ``*_with_meta`` variants set
only those the table actually has.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from datetime import datetime, timezone
from typing import Any

from .types import TableMeta

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def now_timestamp() -> str:
    """Return the current UTC time as ``YYYY-MM-DD HH:MM:SS``."""
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)


def _create_fields(user_id: str) -> dict[str, str]:
    ts = now_timestamp()
    return {
        "created_at": ts,
        "updated_at": ts,
        "created_by": user_id,
        "modified_by": user_id,
    }


def _update_fields(user_id: str) -> dict[str, str]:
    return {"updated_at": now_timestamp(), "modified_by": user_id}


def inject_create(data: MutableMapping[str, Any], user_id: str) -> None:
    """Set created_at, updated_at, created_by and modified_by."""
    fields = _create_fields(user_id)
    data.update(fields)
    logger.debug(
        "AuditInjector: injected CREATE audit fields (user=%s, ts=%s)",
        user_id,
        fields["created_at"],
    )


def inject_update(data: MutableMapping[str, Any], user_id: str) -> None:
    """Set updated_at and modified_by."""
    fields = _update_fields(user_id)
    data.update(fields)
    logger.debug(
        "AuditInjector: injected UPDATE audit fields (user=%s, ts=%s)",
        user_id,
        fields["updated_at"],
    )


def inject_create_with_meta(
    data: MutableMapping[str, Any], user_id: str, meta: TableMeta
) -> None:
    """Set the CREATE audit fields that the table has columns for."""
    data.update(
        (name, value)
        for name, value in _create_fields(user_id).items()
        if meta.has_column(name)
    )
    logger.debug(
        "AuditInjector: injected CREATE audit fields with meta (table=%s, user=%s)",
        meta.name,
        user_id,
    )


def inject_update_with_meta(
    data: MutableMapping[str, Any], user_id: str, meta: TableMeta
) -> None:
    """Set the UPDATE audit fields that the table has columns for."""
    data.update(
        (name, value)
        for name, value in _update_fields(user_id).items()
        if meta.has_column(name)
    )
    logger.debug(
        "AuditInjector: injected UPDATE audit fields with meta (table=%s, user=%s)",
        meta.name,
        user_id,
    )