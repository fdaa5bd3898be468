"""Random UUID v4 codes for tables that carry a ``code`` column."""

from __future__ import annotations

import logging
import uuid
from collections.abc import MutableMapping
from typing import Any, Optional

from .types import TableMeta

logger = logging.getLogger(__name__)


def generate_uuid() -> str:
    """Return a random version-4 UUID in lower-case canonical form."""
    return str(uuid.uuid4())


def _has_code(data: MutableMapping[str, Any]) -> bool:
    value = data.get("code")
    return value is not None and value != ""


def inject_code(data: MutableMapping[str, Any], meta: TableMeta) -> Optional[str]:
    """Set ``data["code"]`` to a fresh UUID when the table has a code column
    and no non-empty code was supplied.

    Returns the injected code, or None when nothing was injected.
    """
    if not meta.has_column("code"):
        return None
    if _has_code(data):
        logger.debug(
            "CodeGenerator: 'code' already provided for table '%s', "
            "skipping injection",
            meta.name,
        )
        return None
    code = generate_uuid()
    data["code"] = code
    logger.debug("CodeGenerator: injected code '%s' for table '%s'", code, meta.name)
    return code