"""
Coupon identity helpers.

A coupon is addressed by ``<holder>-<meal slot>-<family member index>``.
The same key is used as the database's unique id and as the local
cache key, so it must be deterministic.
"""

from datetime import datetime
from typing import Optional


def derive_key(holder_id, meal_slot_id, family_member_index: int = 0) -> str:
    """
    Build the composite coupon key.

    Raises:
        ValueError: If any component is missing or the index is negative
    """
    if holder_id in (None, '') or meal_slot_id in (None, ''):
        raise ValueError("holder_id and meal_slot_id are required")
    if family_member_index is None or int(family_member_index) < 0:
        raise ValueError("family_member_index must be a non-negative integer")

    return f"{holder_id}-{meal_slot_id}-{int(family_member_index)}"


def is_complete(claimed_at: Optional[datetime], expires_at: Optional[datetime]) -> bool:
    """
    True when the claim timestamps agree: both set (claimed) or both
    unset (never claimed). A record with only one of them is partial.
    """
    return (claimed_at is None) == (expires_at is None)


def has_claim_timestamps(claimed_at: Optional[datetime], expires_at: Optional[datetime]) -> bool:
    return claimed_at is not None and expires_at is not None
