"""Shared model utilities."""

import uuid
from datetime import UTC, datetime


def generate_link_id() -> str:
    """Short, human-enterable identifier such as ``A1B2C3D4``."""
    return uuid.uuid4().hex[:8].upper()


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
