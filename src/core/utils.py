"""Core utility functions."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Get current UTC datetime with timezone info. Always use this instead of datetime.now()."""
    return datetime.now(timezone.utc)


def iso_timestamp(dt: Optional[datetime] = None) -> str:
    """
    ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix.

    Example: ``2025-03-01T14:05:09.123Z``
    """
    dt = dt or utcnow()
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def generate_unique_key() -> str:
    """Generate a random hex key (used for stored file names)."""
    return uuid.uuid4().hex
