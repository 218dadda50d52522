"""
funding.py - Credit Issuance and Reservation Purchases

Two flows put value into participant wallets:

1. compute_deposit() - the host issues credits to a wallet
       Move(source=system, dest=wallet, unit=CREDITS, quantity=amount)

2. compute_purchase() - a participant buys reservation hours at the global price
       Move(source=system, dest=buyer,    unit=HOURS,   quantity=hours)
       Move(source=buyer,  dest=platform, unit=CREDITS, quantity=hours * price)

   A purchase may not push the buyer past RateConfig.reservation_cap.

Hours and credits enter through SYSTEM_WALLET, so every unit's supply
summed over all wallets (system included) stays at zero.
"""

from __future__ import annotations

from ..core import (
    LedgerView, Move, PendingTransaction, TransactionOrigin, OriginType,
    SYSTEM_WALLET, UNIT_HOURS, UNIT_CREDITS,
    InvalidParameter, SameParty, InsufficientFunds, ReservationCapExceeded,
    build_transaction, require_int, require_hours, require_participant,
)
from ..rates import compute_purchase_cost


def compute_deposit(
    view: LedgerView,
    wallet: str,
    amount: int,
) -> PendingTransaction:
    """
    Issue credits to a wallet from the system wallet.

    Raises:
        InvalidParameter: If amount is not a positive integer or wallet is the system wallet
    """
    require_participant("wallet", wallet)
    require_int("amount", amount)
    if amount <= 0:
        raise InvalidParameter(f"amount must be positive, got {amount}")

    moves = [
        Move(
            quantity=amount,
            unit_symbol=UNIT_CREDITS,
            source=SYSTEM_WALLET,
            dest=wallet,
            contract_id=f'deposit_{wallet}',
        ),
    ]
    origin = TransactionOrigin(OriginType.SYSTEM, SYSTEM_WALLET, "DEPOSIT")
    return build_transaction(view, moves, origin=origin)


def compute_purchase(
    view: LedgerView,
    buyer: str,
    hours: int,
) -> PendingTransaction:
    """
    Buy reservation hours from the platform at the global price.

    Args:
        view: Read-only ledger access
        buyer: Wallet buying the hours
        hours: Hours to buy (positive)

    Returns:
        PendingTransaction issuing the hours and paying the platform.

    Raises:
        InvalidDuration: If hours <= 0
        SameParty: If the platform wallet tries to buy from itself
        ReservationCapExceeded: If the buyer would hold more than reservation_cap hours
        InsufficientFunds: If the buyer cannot pay hours * price_per_hour

    Example:
        # price_per_hour=500: 5 hours cost 2500 credits
        pending = compute_purchase(view, "bob", 5)
    """
    require_participant("buyer", buyer)
    require_hours(hours)

    platform = view.platform_wallet
    if buyer == platform:
        raise SameParty("The platform wallet cannot purchase from itself")

    rates = view.rates
    reservation = view.get_balance(buyer, UNIT_HOURS)
    if reservation + hours > rates.reservation_cap:
        raise ReservationCapExceeded(
            f"{buyer} would hold {reservation + hours} reservation hours, "
            f"cap is {rates.reservation_cap}"
        )

    cost = compute_purchase_cost(hours, rates)
    funds = view.get_balance(buyer, UNIT_CREDITS)
    if funds < cost:
        raise InsufficientFunds(f"{buyer} holds {funds} credits, purchase costs {cost}")

    moves = [
        Move(
            quantity=hours,
            unit_symbol=UNIT_HOURS,
            source=SYSTEM_WALLET,
            dest=buyer,
            contract_id=f'purchase_{buyer}_hours',
        ),
        Move(
            quantity=cost,
            unit_symbol=UNIT_CREDITS,
            source=buyer,
            dest=platform,
            contract_id=f'purchase_{buyer}_payment',
        ),
    ]
    origin = TransactionOrigin(OriginType.PURCHASE, buyer)
    return build_transaction(view, moves, origin=origin)
