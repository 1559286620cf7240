"""Shared Pydantic helpers for request validation."""
from __future__ import annotations

from agentfails.services.chain import is_address, normalize_address


def validate_wallet(value: str | None, field: str) -> str | None:
    """Return the lower-cased address, or raise if it is not a 0x address."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not is_address(value):
        raise ValueError(f"{field} must be a valid 0x address")
    return normalize_address(value)


def normalize_wallet(value: str | None) -> str | None:
    """Return the trimmed, lower-cased wallet, or None when blank.

    Membership lookups decide whether the wallet may act, so no format check
    is applied here.
    """
    if value is None:
        return None
    return value.strip().lower() or None
