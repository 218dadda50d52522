"""
test_rent.py - Unit tests for rental transaction builder

Tests:
- compute_rent: payment and commission moves, listing shrink
- Precondition order (first failure wins)
- Commission rounding and zero-commission rentals
- quote_rent
"""

import pytest

from spaceledger import (
    Listing, RateConfig, OriginType,
    SameParty, InvalidDuration, InsufficientListing,
    InsufficientReservation, InsufficientFunds,
    UNIT_CREDITS, UNIT_HOURS, compute_rent, quote_rent,
)
from tests.fake_view import FakeView


def _view(renter_hours=5, renter_credits=1000, listing=Listing(10, 100), rates=None):
    return FakeView(
        balances={
            'alice': {'HOURS': 10, 'CREDITS': 0},
            'bob': {'HOURS': renter_hours, 'CREDITS': renter_credits},
        },
        listings={'alice': listing},
        rates=rates,
    )


class TestComputeRent:

    def test_rent_moves(self):
        pending = compute_rent(_view(), 'bob', 'alice', 5)

        payment, commission = pending.moves
        assert (payment.source, payment.dest, payment.unit_symbol, payment.quantity) == \
            ('bob', 'alice', UNIT_CREDITS, 500)
        assert (commission.source, commission.dest, commission.quantity) == \
            ('bob', 'platform', 25)
        assert all(m.unit_symbol != UNIT_HOURS for m in pending.moves)

    def test_rent_shrinks_listing(self):
        pending = compute_rent(_view(), 'bob', 'alice', 5)
        change, = pending.listing_changes
        assert change.owner == 'alice'
        assert change.old == Listing(10, 100)
        assert change.new == Listing(5, 100)
        assert pending.capacity_delta == -5

    def test_rent_origin(self):
        pending = compute_rent(_view(), 'bob', 'alice', 5)
        assert pending.origin.origin_type == OriginType.RENTAL
        assert pending.origin.source_id == 'bob'
        assert pending.origin.event_type == "RENT_FROM:alice"

    def test_rent_entire_listing(self):
        pending = compute_rent(_view(renter_hours=10), 'bob', 'alice', 10)
        assert pending.listing_changes[0].new == Listing(0, 100)

    def test_zero_commission_emits_single_move(self):
        # 1 hour @ 10 with 5% commission rounds to 0
        pending = compute_rent(_view(listing=Listing(10, 10)), 'bob', 'alice', 1)
        assert len(pending.moves) == 1
        assert pending.moves[0].quantity == 10

    def test_zero_commission_rate(self):
        pending = compute_rent(_view(rates=RateConfig(commission_percent=0)), 'bob', 'alice', 5)
        assert len(pending.moves) == 1

    def test_exact_funds_accepted(self):
        pending = compute_rent(_view(renter_credits=525), 'bob', 'alice', 5)
        assert sum(m.quantity for m in pending.moves) == 525

    def test_platform_as_renter_pays_no_commission(self):
        view = FakeView(
            balances={'platform': {'HOURS': 5, 'CREDITS': 1000}},
            listings={'alice': Listing(10, 100)},
        )
        pending = compute_rent(view, 'platform', 'alice', 5)
        assert len(pending.moves) == 1
        assert pending.moves[0].dest == 'alice'


class TestRentPreconditions:

    def test_same_party(self):
        with pytest.raises(SameParty):
            compute_rent(_view(), 'alice', 'alice', 5)

    def test_same_party_checked_before_hours(self):
        with pytest.raises(SameParty):
            compute_rent(_view(), 'alice', 'alice', 0)

    def test_invalid_duration(self):
        with pytest.raises(InvalidDuration):
            compute_rent(_view(), 'bob', 'alice', 0)

    def test_insufficient_listing(self):
        with pytest.raises(InsufficientListing):
            compute_rent(_view(), 'bob', 'alice', 11)

    def test_listing_checked_before_reservation(self):
        with pytest.raises(InsufficientListing):
            compute_rent(_view(renter_hours=0), 'bob', 'alice', 11)

    def test_insufficient_reservation(self):
        with pytest.raises(InsufficientReservation):
            compute_rent(_view(renter_hours=0), 'bob', 'alice', 5)

    def test_reservation_checked_before_funds(self):
        with pytest.raises(InsufficientReservation):
            compute_rent(_view(renter_hours=0, renter_credits=0), 'bob', 'alice', 5)

    def test_insufficient_funds(self):
        with pytest.raises(InsufficientFunds):
            compute_rent(_view(renter_credits=524), 'bob', 'alice', 5)

    def test_rent_from_wallet_without_listing(self):
        with pytest.raises(InsufficientListing):
            compute_rent(_view(), 'bob', 'carol', 1)


class TestQuoteRent:

    def test_quote(self):
        assert quote_rent(_view(), 'alice', 5) == {
            'rental_cost': 500,
            'commission': 25,
            'total_cost': 525,
        }
