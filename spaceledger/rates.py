"""
rates.py - Rate Configuration and Pricing Arithmetic

This module holds the owner-settable scalars of the marketplace and the pure
integer arithmetic that depends on them:
1. RateConfig - immutable snapshot of price, commission, refund, cap and ceiling
2. validate_* - per-scalar bound checks used by RateConfig and the ledger setters
3. compute_* - rental cost, commission, refund and purchase amounts

=== ROUNDING ===

All amounts are whole credits. Percentages are applied with floor division,
so the platform never receives a fractional commission and a refund never
pays out more than its exact value:

    commission    = floor(rental_cost * commission_percent / 100)
    refund_amount = floor(hours * price_per_hour * refund_percent / 100)
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Tuple

from .core import (
    InvalidParameter, require_int, require_price, require_hours,
    DEFAULT_PRICE_PER_HOUR, DEFAULT_COMMISSION_PERCENT, DEFAULT_REFUND_PERCENT,
    DEFAULT_RESERVATION_CAP, DEFAULT_CAPACITY_CEILING, MAX_PERCENT,
)


# =============================================================================
# VALIDATION
# =============================================================================

def validate_percent(name: str, rate: int) -> int:
    """Check 0 <= rate <= 100."""
    require_int(name, rate)
    if rate < 0 or rate > MAX_PERCENT:
        raise InvalidParameter(f"{name} must be between 0 and {MAX_PERCENT}, got {rate}")
    return rate


def validate_reservation_cap(cap: int) -> int:
    require_int("reservation_cap", cap)
    if cap <= 0:
        raise InvalidParameter(f"reservation_cap must be positive, got {cap}")
    return cap


def validate_capacity_ceiling(ceiling: int, reserved: int = 0) -> int:
    """
    Check a capacity ceiling against the hours already committed.

    Args:
        ceiling: Proposed ceiling
        reserved: Hours currently listed across all wallets

    Raises:
        InvalidParameter: If ceiling is negative or below reserved.
    """
    require_int("capacity_ceiling", ceiling)
    if ceiling < 0:
        raise InvalidParameter(f"capacity_ceiling cannot be negative, got {ceiling}")
    if ceiling < reserved:
        raise InvalidParameter(
            f"capacity_ceiling {ceiling} is below committed capacity {reserved}"
        )
    return ceiling


# =============================================================================
# RATE CONFIGURATION
# =============================================================================

@dataclass(frozen=True, slots=True)
class RateConfig:
    """
    Owner-settable marketplace parameters.

    Attributes:
        price_per_hour: Global price of one reservation hour (purchases, refunds)
        commission_percent: Platform commission added on top of a rental, 0..100
        refund_percent: Share of the global price paid back on refund, 0..100
        reservation_cap: Maximum reservation hours one wallet may purchase up to
        capacity_ceiling: Upper bound on hours listed across all wallets

    Every field is validated on construction. Use the with_* methods to derive
    an updated configuration; the original is never modified.
    """
    price_per_hour: int = DEFAULT_PRICE_PER_HOUR
    commission_percent: int = DEFAULT_COMMISSION_PERCENT
    refund_percent: int = DEFAULT_REFUND_PERCENT
    reservation_cap: int = DEFAULT_RESERVATION_CAP
    capacity_ceiling: int = DEFAULT_CAPACITY_CEILING

    def __post_init__(self):
        require_price(self.price_per_hour)
        validate_percent("commission_percent", self.commission_percent)
        validate_percent("refund_percent", self.refund_percent)
        validate_reservation_cap(self.reservation_cap)
        validate_capacity_ceiling(self.capacity_ceiling)

    def with_price(self, price: int) -> RateConfig:
        return replace(self, price_per_hour=require_price(price))

    def with_commission(self, rate: int) -> RateConfig:
        return replace(self, commission_percent=validate_percent("commission_percent", rate))

    def with_refund(self, rate: int) -> RateConfig:
        return replace(self, refund_percent=validate_percent("refund_percent", rate))

    def with_reservation_cap(self, cap: int) -> RateConfig:
        return replace(self, reservation_cap=validate_reservation_cap(cap))

    def with_capacity_ceiling(self, ceiling: int, reserved: int = 0) -> RateConfig:
        return replace(self, capacity_ceiling=validate_capacity_ceiling(ceiling, reserved))


# =============================================================================
# PURE ARITHMETIC
# =============================================================================

def compute_rental_cost(hours: int, price: int) -> int:
    """Base cost of renting hours from a listing priced per hour."""
    return require_hours(hours) * price


def compute_commission(rental_cost: int, commission_percent: int) -> int:
    """
    Platform commission on a rental, rounded down.

    Example:
        rental_cost=500, commission_percent=5 -> 25
        rental_cost=10,  commission_percent=5 -> 0
    """
    return rental_cost * commission_percent // MAX_PERCENT


def compute_rental_total(hours: int, price: int, commission_percent: int) -> Tuple[int, int, int]:
    """
    Split a rental into what each party sees.

    Returns:
        (rental_cost, commission, total_cost) where total_cost is what the
        renter pays, rental_cost goes to the lister and commission to the
        platform.
    """
    rental_cost = compute_rental_cost(hours, price)
    commission = compute_commission(rental_cost, commission_percent)
    return rental_cost, commission, rental_cost + commission


def compute_refund_amount(hours: int, rates: RateConfig) -> int:
    """
    Credits paid back for returning reservation hours.

    Uses the current global price, not the price any hours were listed or
    bought at.

    Example:
        hours=3, price_per_hour=500, refund_percent=90
        refund = 3 * 500 * 90 // 100 = 1350
    """
    return require_hours(hours) * rates.price_per_hour * rates.refund_percent // MAX_PERCENT


def compute_purchase_cost(hours: int, rates: RateConfig) -> int:
    """Credits charged for buying reservation hours at the global price."""
    return require_hours(hours) * rates.price_per_hour
