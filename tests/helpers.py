"""
helpers.py - Ledger construction and comparison helpers shared by the tests

Hypothesis tests cannot use function-scoped fixtures, so they build their
ledgers through these functions directly.
"""

from datetime import datetime
from typing import Dict, Any

from spaceledger import (
    Ledger, RateConfig,
    UNIT_HOURS, UNIT_CREDITS,
)


OWNER = "admin"
PLATFORM = "platform"

# Marketplace scenario rates: ceiling=10000, price=500, commission=5%, refund=90%
SCENARIO_RATES = RateConfig(
    price_per_hour=500,
    commission_percent=5,
    refund_percent=90,
    reservation_cap=1000,
    capacity_ceiling=10000,
)


def make_ledger(rates: RateConfig = SCENARIO_RATES, test_mode: bool = True) -> Ledger:
    """Create a quiet ledger owned by OWNER."""
    return Ledger(
        "test", owner=OWNER, rates=rates,
        initial_time=datetime(2025, 1, 1),
        verbose=False, test_mode=test_mode,
    )


def fund(ledger: Ledger, wallet: str, hours: int = 0, credits: int = 0) -> None:
    """Give a wallet balances directly (test mode only)."""
    if hours:
        ledger.set_balance(wallet, UNIT_HOURS, hours)
    if credits:
        ledger.set_balance(wallet, UNIT_CREDITS, credits)


def compare_snapshots(before: Dict[str, Any], after: Dict[str, Any]) -> Dict[str, Any]:
    """Return the top-level snapshot keys whose values differ."""
    return {
        key: {"before": before.get(key), "after": after.get(key)}
        for key in set(before) | set(after)
        if before.get(key) != after.get(key)
    }
