"""Utility helpers for the models package."""

from __future__ import annotations

import uuid
from typing import Optional


def generate_id() -> str:
    """Return a new random UUID4 string used as a primary key."""
    return str(uuid.uuid4())


def normalize_contact(contact: Optional[str]) -> Optional[str]:
    """Trim ``contact`` and collapse blank values to ``None``.

    Contacts take part in a per-campaign uniqueness constraint, so two
    spellings of "no contact" must both map to ``NULL``.
    """
    if contact is None:
        return None
    if not isinstance(contact, str):
        raise TypeError("contact must be a string")
    normalized = contact.strip()
    return normalized or None
