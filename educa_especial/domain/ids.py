"""Record identifier helpers."""
from __future__ import annotations

import uuid


def new_id() -> str:
    return str(uuid.uuid4())


def is_valid_id(value: str | None) -> bool:
    """Return True when value is a well-formed UUID string."""
    if not value:
        return False
    try:
        parsed = uuid.UUID(value.strip())
    except (AttributeError, ValueError):
        return False
    return str(parsed) == value.strip().lower()


def id_from_legacy(collection: str, value: str) -> str:
    """Stable UUID for an id imported from older data (same input, same id)."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"educa-especial:{collection}:{value}"))
