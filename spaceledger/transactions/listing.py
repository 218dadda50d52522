"""
listing.py - Listing Registry Transactions

This module builds the transactions that add hours to, and remove hours from,
a participant's listing:
1. compute_add_listing() - offer more hours (backed by owned reservation hours)
2. compute_remove_listing() - withdraw offered hours
3. compute_listed_hours() - total listed hours across a set of wallets

=== BACKING RULE ===

    listing.hours (after add) <= reservation_balance(owner)

A participant can only offer hours they hold. The capacity counter moves by
exactly the listing delta; Ledger.execute() applies both in one step.

=== PRICE MERGE ===

Adding hours to an existing listing replaces its price with the new one, so
every unsold hour of that owner is repriced. Removing hours keeps the price.

All functions take LedgerView (read-only) and return immutable results.
"""

from __future__ import annotations
from typing import Iterable

from ..core import (
    LedgerView, ListingChange, Listing, PendingTransaction,
    TransactionOrigin, OriginType, UNIT_HOURS,
    InsufficientListing, InsufficientReservation,
    build_transaction, require_hours, require_price, require_participant,
)
from ..capacity import reserve_capacity


def compute_add_listing(
    view: LedgerView,
    owner: str,
    hours: int,
    price: int,
) -> PendingTransaction:
    """
    Offer additional hours for rent at a price per hour.

    Args:
        view: Read-only ledger access
        owner: Wallet offering the hours
        hours: Hours to add to the listing (positive)
        price: Price per hour in credits (positive); overwrites the current price

    Returns:
        PendingTransaction with a single ListingChange and no moves.

    Raises:
        InvalidDuration: If hours <= 0
        InvalidPrice: If price <= 0
        InsufficientReservation: If the owner holds fewer reservation hours
                                 than the resulting listing
        CapacityExceeded: If the global ceiling would be breached

    Example:
        # Alice holds 10 reservation hours and lists them at 100 each
        pending = compute_add_listing(view, "alice", 10, 100)
        ledger.execute(pending)
        # ledger.get_listing("alice") == Listing(10, 100)
    """
    require_participant("owner", owner)
    require_hours(hours)
    require_price(price)

    existing = view.get_listing(owner)
    reservation = view.get_balance(owner, UNIT_HOURS)
    if reservation < existing.hours + hours:
        raise InsufficientReservation(
            f"{owner} holds {reservation} reservation hours, "
            f"cannot list {existing.hours + hours}"
        )

    # Surface the capacity breach here; execute() checks again on apply.
    reserve_capacity(view.capacity_reserved, hours, view.rates.capacity_ceiling)

    change = ListingChange(
        owner=owner,
        old=existing,
        new=Listing(hours=existing.hours + hours, price=price),
    )
    origin = TransactionOrigin(OriginType.LISTING, owner, "ADD")
    return build_transaction(view, [], [change], origin)


def compute_remove_listing(
    view: LedgerView,
    owner: str,
    hours: int,
) -> PendingTransaction:
    """
    Withdraw hours from a listing. The listing price is preserved.

    Raises:
        InvalidDuration: If hours <= 0
        InsufficientListing: If the listing holds fewer than hours
    """
    require_participant("owner", owner)
    require_hours(hours)

    existing = view.get_listing(owner)
    if existing.hours < hours:
        raise InsufficientListing(
            f"{owner} lists {existing.hours} hours, cannot remove {hours}"
        )

    change = ListingChange(
        owner=owner,
        old=existing,
        new=Listing(hours=existing.hours - hours, price=existing.price),
    )
    origin = TransactionOrigin(OriginType.LISTING, owner, "REMOVE")
    return build_transaction(view, [], [change], origin)


def compute_listed_hours(view: LedgerView, wallets: Iterable[str]) -> int:
    """Sum listed hours over wallets. Matches capacity_reserved when given every wallet."""
    return sum(view.get_listing(w).hours for w in wallets)
