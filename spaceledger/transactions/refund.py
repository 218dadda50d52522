"""
refund.py - Refund of Reservation Hours

compute_refund() converts reservation hours back into credits at a discount.

Pattern:
    Hours are redeemed (destroyed through the system wallet):
        Move(source=user, dest=system, unit=HOURS, quantity=hours)
    The platform pays the refund:
        Move(source=platform, dest=user, unit=CREDITS, quantity=refund_amount)

The refund uses the current global price_per_hour and refund_percent, not
the price at which the hours were bought or listed.
"""

from __future__ import annotations

from ..core import (
    LedgerView, Move, PendingTransaction, TransactionOrigin, OriginType,
    SYSTEM_WALLET, UNIT_HOURS, UNIT_CREDITS,
    SameParty, InsufficientReservation, RefundUnfunded,
    build_transaction, require_hours, require_participant,
)
from ..rates import compute_refund_amount


def compute_refund(
    view: LedgerView,
    user: str,
    hours: int,
) -> PendingTransaction:
    """
    Return reservation hours to the platform for credits.

    Args:
        view: Read-only ledger access
        user: Wallet returning the hours
        hours: Hours to return (positive)

    Returns:
        PendingTransaction with the HOURS redemption and the CREDITS payout.

    Raises:
        InvalidDuration: If hours <= 0
        InsufficientReservation: If the user holds fewer than hours
        RefundUnfunded: If the platform wallet cannot cover the payout
        SameParty: If the platform wallet itself requests a refund

    Example:
        # price_per_hour=500, refund_percent=90
        # refund of 3 hours pays 3 * 500 * 90 // 100 = 1350 credits
        pending = compute_refund(view, "alice", 3)
    """
    require_participant("user", user)
    require_hours(hours)

    platform = view.platform_wallet
    if user == platform:
        raise SameParty("The platform wallet cannot refund to itself")

    reservation = view.get_balance(user, UNIT_HOURS)
    if reservation < hours:
        raise InsufficientReservation(
            f"{user} holds {reservation} reservation hours, cannot refund {hours}"
        )

    refund_amount = compute_refund_amount(hours, view.rates)
    platform_funds = view.get_balance(platform, UNIT_CREDITS)
    if platform_funds < refund_amount:
        raise RefundUnfunded(
            f"platform holds {platform_funds} credits, refund needs {refund_amount}"
        )

    moves = [
        Move(
            quantity=hours,
            unit_symbol=UNIT_HOURS,
            source=user,
            dest=SYSTEM_WALLET,
            contract_id=f'refund_{user}_redeem',
        ),
    ]
    # refund_percent of zero redeems the hours without a payout.
    if refund_amount > 0:
        moves.append(Move(
            quantity=refund_amount,
            unit_symbol=UNIT_CREDITS,
            source=platform,
            dest=user,
            contract_id=f'refund_{user}_payout',
        ))

    origin = TransactionOrigin(OriginType.REFUND, user)
    return build_transaction(view, moves, origin=origin)
