"""
SQL Safety Utilities
====================

Helpers that keep dict-key → column-name interpolation safe for the Plants
and CareTasks tables.

Only keys in an explicit allowlist reach a ``SET …`` or ``INSERT …`` SQL
fragment; anything else is dropped and logged. Values are converted to what
SQLite stores (ISO strings for datetimes, plain strings for enums).

Usage::

    from infrastructure.database.sql_safety import safe_columns, build_set_clause

    cols = safe_columns(fields, PLANT_UPDATE_COLUMNS, context="update_plant")
    set_clause, values = build_set_clause(cols)
    db.execute(f"UPDATE Plants SET {set_clause} WHERE plant_id = ?", [*values, plant_id])
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from enum import Enum
from typing import Any

from app.utils.time import to_iso

logger = logging.getLogger(__name__)

# Column names must be simple identifiers: letters, digits, underscores.
_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def to_db_value(value: Any) -> Any:
    """Convert a Python value to its SQLite storage form."""
    if isinstance(value, datetime):
        return to_iso(value)
    if isinstance(value, Enum):
        return value.value
    return value


def safe_columns(
    data: dict[str, Any],
    allowed: frozenset[str] | set[str],
    *,
    context: str = "",
) -> dict[str, Any]:
    """Return *data* filtered to allowlisted columns, values made storable.

    Parameters
    ----------
    data:
        Incoming dict (service layer fields).
    allowed:
        Column names that may be interpolated into SQL.
    context:
        Label for log messages (e.g. ``"update_task"``).
    """
    filtered: dict[str, Any] = {}
    rejected: list[str] = []

    for key, value in data.items():
        if key not in allowed or not _IDENT_RE.match(key):
            rejected.append(key)
            continue
        filtered[key] = to_db_value(value)

    if rejected:
        logger.warning(
            "safe_columns(%s): dropped non-allowed keys: %s",
            context or "?",
            rejected,
        )

    return filtered


def build_set_clause(cols: dict[str, Any]) -> tuple[str, list[Any]]:
    """Build a ``SET col1 = ?, col2 = ?`` fragment from *cols*.

    >>> build_set_clause({"status": "skipped", "updated_at": "2026-01-01T00:00:00+00:00"})
    ('status = ?, updated_at = ?', ['skipped', '2026-01-01T00:00:00+00:00'])
    """
    clause = ", ".join(f"{k} = ?" for k in cols)
    return clause, list(cols.values())


def build_insert_parts(cols: dict[str, Any]) -> tuple[str, str, list[Any]]:
    """Build column-list, placeholder-list, and values for INSERT.

    >>> build_insert_parts({"user_id": 1, "name": "Fern"})
    ('user_id, name', '?, ?', [1, 'Fern'])
    """
    keys = list(cols.keys())
    return ", ".join(keys), ", ".join("?" for _ in keys), list(cols.values())
