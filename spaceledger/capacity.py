"""
capacity.py - Global Capacity Tracker

The capacity counter is the number of hours listed across all wallets.
It is bounded above by RateConfig.capacity_ceiling:

    0 <= capacity_reserved <= capacity_ceiling
    capacity_reserved == sum(listing.hours for every wallet)

Only Ledger.execute() moves the counter, using the net hours delta of a
transaction's listing changes, so the counter and the listings change in
the same step.
"""
from __future__ import annotations

from .core import CapacityExceeded, require_int


def reserve_capacity(current: int, delta: int, ceiling: int) -> int:
    """
    Compute the capacity counter after applying a signed delta.

    Args:
        current: Hours currently reserved
        delta: Signed change (positive for new listings, negative for removals)
        ceiling: Global capacity ceiling

    Returns:
        The new counter value, clamped at zero on the negative side.

    Raises:
        CapacityExceeded: If the new total would exceed the ceiling.

    Example:
        reserve_capacity(10, 5, 20)   -> 15
        reserve_capacity(10, -15, 20) -> 0
        reserve_capacity(10, 11, 20)  -> CapacityExceeded
    """
    require_int("delta", delta)
    new_total = current + delta
    if new_total > ceiling:
        raise CapacityExceeded(
            f"capacity {new_total} would exceed ceiling {ceiling} "
            f"({current} reserved, {delta:+d} requested)"
        )
    return max(new_total, 0)


def available_capacity(current: int, ceiling: int) -> int:
    """Hours that can still be listed before reaching the ceiling."""
    return max(ceiling - current, 0)
