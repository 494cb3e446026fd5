"""Utility helpers for the models package."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def dt_iso(dt: Optional[datetime]) -> Optional[str]:
    """Convert a datetime to an ISO 8601 string in UTC, or return None.

    SQLite drops tzinfo on read, so naive values are taken to be UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()
