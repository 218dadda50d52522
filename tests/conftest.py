"""
conftest.py - Shared pytest fixtures for spaceledger tests

Provides common fixtures used across unit, functional and conformance tests:
- Basic ledgers (empty, funded, listed)
- A ledger funded only through transactions (no test mode)
"""

import pytest

from tests.helpers import OWNER, PLATFORM, make_ledger, fund


# =============================================================================
# BASIC FIXTURES
# =============================================================================

@pytest.fixture
def empty_ledger():
    """Fresh ledger with scenario rates and no balances."""
    return make_ledger()


@pytest.fixture
def funded_ledger():
    """alice and bob with reservation hours and credits; platform with a float."""
    ledger = make_ledger()
    fund(ledger, "alice", hours=10, credits=1000)
    fund(ledger, "bob", hours=5, credits=1000)
    fund(ledger, PLATFORM, credits=5000)
    return ledger


@pytest.fixture
def listed_ledger(funded_ledger):
    """funded_ledger with alice listing 10 hours at 100 credits."""
    funded_ledger.add_listing("alice", 10, 100)
    return funded_ledger


@pytest.fixture
def production_ledger():
    """Ledger outside test mode, funded only through transactions."""
    ledger = make_ledger(test_mode=False)
    ledger.deposit(OWNER, "alice", 20000)
    ledger.deposit(OWNER, "bob", 20000)
    ledger.purchase("alice", 10)
    ledger.purchase("bob", 5)
    return ledger
