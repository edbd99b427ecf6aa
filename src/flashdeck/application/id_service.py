"""Stable card identifiers."""

from ulid import ULID


def generate_card_id() -> str:
    """Generate a unique, time-sortable card id using ULID."""
    return str(ULID())
