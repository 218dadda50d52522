"""
test_core_types.py - Unit tests for core data structures

Tests:
- Move: creation, validation, immutability
- Listing: validation, empty listing, repr
- ListingChange: hours delta
- PendingTransaction / Transaction: construction, capacity delta
- Argument validators
"""

import pytest
from datetime import datetime

from spaceledger import (
    Move, Listing, ListingChange, Transaction, PendingTransaction,
    TransactionOrigin, OriginType, EMPTY_LISTING,
    InvalidParameter, InvalidDuration, InvalidPrice,
    SYSTEM_WALLET, UNIT_HOURS, UNIT_CREDITS,
)
from spaceledger.core import (
    require_int, require_hours, require_price, require_identity, require_participant,
)


def _origin() -> TransactionOrigin:
    return TransactionOrigin(origin_type=OriginType.SYSTEM, source_id="test")


class TestMoveCreation:
    """Tests for Move creation and validation."""

    def test_create_valid_move(self):
        move = Move(100, UNIT_CREDITS, "alice", "bob", "tx_001")
        assert move.source == "alice"
        assert move.dest == "bob"
        assert move.unit_symbol == UNIT_CREDITS
        assert move.quantity == 100
        assert move.contract_id == "tx_001"

    def test_move_is_immutable(self):
        move = Move(5, UNIT_HOURS, "alice", "bob", "tx_001")
        with pytest.raises(AttributeError):
            move.quantity = 10

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_move_rejects_non_positive_quantity(self, quantity):
        with pytest.raises(ValueError, match="positive"):
            Move(quantity, UNIT_CREDITS, "alice", "bob", "tx_001")

    @pytest.mark.parametrize("quantity", [1.5, True, "10"])
    def test_move_rejects_non_integer_quantity(self, quantity):
        with pytest.raises(ValueError, match="int"):
            Move(quantity, UNIT_CREDITS, "alice", "bob", "tx_001")

    def test_move_rejects_unknown_unit(self):
        with pytest.raises(ValueError, match="unit_symbol"):
            Move(1, "USD", "alice", "bob", "tx_001")

    def test_move_rejects_same_source_and_dest(self):
        with pytest.raises(ValueError, match="different"):
            Move(1, UNIT_CREDITS, "alice", "alice", "tx_001")

    @pytest.mark.parametrize("source,dest,contract", [
        ("", "bob", "tx"),
        ("alice", "  ", "tx"),
        ("alice", "bob", ""),
    ])
    def test_move_rejects_empty_identifiers(self, source, dest, contract):
        with pytest.raises(ValueError, match="empty"):
            Move(1, UNIT_CREDITS, source, dest, contract)

    def test_move_repr(self):
        assert repr(Move(3, UNIT_HOURS, "alice", SYSTEM_WALLET, "r")) == \
            "Move(3 HOURS: alice→system)"


class TestListing:
    """Tests for Listing validation."""

    def test_default_listing_is_empty(self):
        assert Listing() == EMPTY_LISTING
        assert EMPTY_LISTING.is_empty()
        assert EMPTY_LISTING.hours == 0 and EMPTY_LISTING.price == 0

    def test_listing_with_hours_requires_price(self):
        with pytest.raises(InvalidPrice):
            Listing(hours=5, price=0)

    def test_empty_listing_keeps_price(self):
        listing = Listing(hours=0, price=100)
        assert listing.is_empty()
        assert listing.price == 100

    @pytest.mark.parametrize("hours,price", [(-1, 100), (5, -1)])
    def test_listing_rejects_negative_fields(self, hours, price):
        with pytest.raises(InvalidParameter):
            Listing(hours=hours, price=price)

    def test_listing_rejects_non_integer(self):
        with pytest.raises(InvalidParameter):
            Listing(hours=2.5, price=100)

    def test_listing_repr(self):
        assert repr(Listing(10, 100)) == "Listing(10h @ 100)"


class TestListingChange:

    def test_hours_delta_positive_on_growth(self):
        change = ListingChange("alice", EMPTY_LISTING, Listing(10, 100))
        assert change.hours_delta == 10

    def test_hours_delta_negative_on_shrink(self):
        change = ListingChange("alice", Listing(10, 100), Listing(4, 100))
        assert change.hours_delta == -6


class TestTransactions:
    """Tests for PendingTransaction and Transaction."""

    def test_pending_capacity_delta_sums_changes(self):
        pending = PendingTransaction(
            moves=(),
            listing_changes=(
                ListingChange("alice", EMPTY_LISTING, Listing(10, 100)),
                ListingChange("bob", Listing(5, 50), Listing(2, 50)),
            ),
            origin=_origin(),
            timestamp=datetime(2025, 1, 1),
        )
        assert pending.capacity_delta == 7
        assert not pending.is_empty()

    def test_pending_empty(self):
        pending = PendingTransaction((), (), _origin(), datetime(2025, 1, 1))
        assert pending.is_empty()
        assert pending.capacity_delta == 0

    def test_transaction_requires_content(self):
        with pytest.raises(ValueError, match="moves or listing_changes"):
            Transaction(
                moves=(), listing_changes=(), origin=_origin(),
                timestamp=datetime(2025, 1, 1), exec_id="exec:test:0",
                ledger_name="test", execution_time=datetime(2025, 1, 1),
                sequence_number=0, capacity_before=0, capacity_after=0,
            )

    def test_transaction_collects_contract_ids(self):
        moves = (
            Move(10, UNIT_CREDITS, "bob", "alice", "rent_alice_payment"),
            Move(1, UNIT_CREDITS, "bob", "platform", "rent_alice_commission"),
        )
        tx = Transaction(
            moves=moves, listing_changes=(), origin=_origin(),
            timestamp=datetime(2025, 1, 1), exec_id="exec:test:0",
            ledger_name="test", execution_time=datetime(2025, 1, 1),
            sequence_number=0, capacity_before=0, capacity_after=0,
        )
        assert tx.contract_ids == frozenset({"rent_alice_payment", "rent_alice_commission"})
        assert "exec:test:0" in repr(tx)


class TestValidators:

    def test_require_int_rejects_bool(self):
        with pytest.raises(InvalidParameter):
            require_int("x", True)

    @pytest.mark.parametrize("hours", [0, -3, 1.0])
    def test_require_hours(self, hours):
        with pytest.raises(InvalidDuration):
            require_hours(hours)

    def test_invalid_duration_is_invalid_parameter(self):
        with pytest.raises(InvalidParameter):
            require_hours(0)

    @pytest.mark.parametrize("price", [0, -1, "5"])
    def test_require_price(self, price):
        with pytest.raises(InvalidPrice):
            require_price(price)

    @pytest.mark.parametrize("identity", ["", "   ", None, 42])
    def test_require_identity(self, identity):
        with pytest.raises(InvalidParameter):
            require_identity("wallet", identity)

    def test_require_participant_rejects_system_wallet(self):
        with pytest.raises(InvalidParameter, match="system"):
            require_participant("owner", SYSTEM_WALLET)
        assert require_participant("owner", "alice") == "alice"
