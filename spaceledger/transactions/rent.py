"""
rent.py - Rental of Listed Hours

compute_rent() builds the transaction for one renter taking hours from one
lister's listing.

Pattern:
    Renter pays the listing price plus commission:
        Move(source=renter, dest=lister,   unit=CREDITS, quantity=rental_cost)
        Move(source=renter, dest=platform, unit=CREDITS, quantity=commission)
    Listing shrinks (capacity follows):
        ListingChange(lister, Listing(h, p) -> Listing(h - hours, p))

The renter must already hold at least `hours` reservation hours. Those hours
are consumed and immediately re-credited as actively rented hours, so the
renter's HOURS balance does not change and no HOURS move is emitted. The
lister's HOURS balance is not touched either; only the listing shrinks.

All functions take LedgerView (read-only) and return immutable results.
"""

from __future__ import annotations
from typing import Dict

from ..core import (
    LedgerView, Listing, ListingChange, Move, PendingTransaction,
    TransactionOrigin, OriginType, UNIT_HOURS, UNIT_CREDITS,
    SameParty, InsufficientListing, InsufficientReservation, InsufficientFunds,
    build_transaction, require_hours, require_participant,
)
from ..rates import compute_rental_total


def quote_rent(view: LedgerView, lister: str, hours: int) -> Dict[str, int]:
    """
    Price a rental against the lister's current listing without validating balances.

    Returns:
        Dict with rental_cost, commission and total_cost.
    """
    listing = view.get_listing(lister)
    rental_cost, commission, total_cost = compute_rental_total(
        hours, listing.price, view.rates.commission_percent
    )
    return {
        'rental_cost': rental_cost,
        'commission': commission,
        'total_cost': total_cost,
    }


def compute_rent(
    view: LedgerView,
    renter: str,
    lister: str,
    hours: int,
) -> PendingTransaction:
    """
    Rent hours from another participant's listing.

    Preconditions are checked in this order and the first failure wins:
        1. renter != lister                      (SameParty)
        2. hours > 0                             (InvalidDuration)
        3. listing.hours >= hours                (InsufficientListing)
        4. renter reservation >= hours           (InsufficientReservation)
        5. renter credits >= cost + commission   (InsufficientFunds)

    Args:
        view: Read-only ledger access
        renter: Wallet taking the hours
        lister: Wallet whose listing is consumed
        hours: Hours to rent

    Returns:
        PendingTransaction containing the credit moves and the listing change.

    Example:
        # Listing 10h @ 100, commission 5%, renter rents 5h
        # rental_cost=500, commission=25, renter pays 525
        pending = compute_rent(view, "bob", "alice", 5)
    """
    require_participant("renter", renter)
    require_participant("lister", lister)
    if renter == lister:
        raise SameParty(f"{renter} cannot rent from their own listing")
    require_hours(hours)

    listing = view.get_listing(lister)
    if listing.hours < hours:
        raise InsufficientListing(
            f"{lister} lists {listing.hours} hours, cannot rent {hours}"
        )

    reservation = view.get_balance(renter, UNIT_HOURS)
    if reservation < hours:
        raise InsufficientReservation(
            f"{renter} holds {reservation} reservation hours, needs {hours}"
        )

    rental_cost, commission, total_cost = compute_rental_total(
        hours, listing.price, view.rates.commission_percent
    )
    funds = view.get_balance(renter, UNIT_CREDITS)
    if funds < total_cost:
        raise InsufficientFunds(
            f"{renter} holds {funds} credits, rental costs {total_cost}"
        )

    platform = view.platform_wallet
    moves = [
        Move(
            quantity=rental_cost,
            unit_symbol=UNIT_CREDITS,
            source=renter,
            dest=lister,
            contract_id=f'rent_{lister}_payment',
        ),
    ]
    # Commission rounds down and may be zero on small rentals.
    # The platform renting collects its own commission; nothing to move.
    if commission > 0 and renter != platform:
        moves.append(Move(
            quantity=commission,
            unit_symbol=UNIT_CREDITS,
            source=renter,
            dest=platform,
            contract_id=f'rent_{lister}_commission',
        ))

    change = ListingChange(
        owner=lister,
        old=listing,
        new=Listing(hours=listing.hours - hours, price=listing.price),
    )
    origin = TransactionOrigin(OriginType.RENTAL, renter, f"RENT_FROM:{lister}")
    return build_transaction(view, moves, [change], origin)
