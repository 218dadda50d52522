"""
Atomicity Conformance Tests

INVARIANT: Operations are all-or-nothing.

    ∀ operation O:
        O fails ⟹ every balance, listing, counter and rate is unchanged
        O fails ⟹ nothing is appended to the transaction log

Reads never mutate state either.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from spaceledger import Listing, ExecuteResult, compute_add_listing
from tests.helpers import OWNER, compare_snapshots
from tests.conformance.strategies import (
    PARTICIPANTS, operations, seeded_ledger, apply_operation,
)


class TestAtomicityProperties:

    @given(st.lists(operations, max_size=30))
    @settings(max_examples=150, deadline=None)
    def test_failed_operation_changes_nothing(self, ops):
        ledger = seeded_ledger()
        for op in ops:
            before = ledger.snapshot()
            log_size = len(ledger.transaction_log)
            if not apply_operation(ledger, op):
                assert compare_snapshots(before, ledger.snapshot()) == {}
                assert len(ledger.transaction_log) == log_size

    @given(st.lists(operations, max_size=20), st.sampled_from(PARTICIPANTS))
    @settings(max_examples=100, deadline=None)
    def test_reads_never_mutate(self, ops, wallet):
        ledger = seeded_ledger()
        for op in ops:
            apply_operation(ledger, op)
        before = ledger.snapshot()
        ledger.get_listing(wallet)
        ledger.get_reservation_balance(wallet)
        ledger.get_monetary_balance(wallet)
        ledger.get_listing("never-seen")
        ledger.get_monetary_balance("never-seen")
        assert ledger.snapshot() == before


class TestAtomicityExamples:

    def test_failed_rent_leaves_listing(self):
        ledger = seeded_ledger()
        ledger.add_listing("alice", 5, 1000)
        before = ledger.snapshot()
        # 5 * 1000 + 5% exceeds bob's 3000 credits
        assert not apply_operation(ledger, ("rent", "bob", "alice", 5))
        assert ledger.snapshot() == before
        assert ledger.get_listing("alice") == Listing(5, 1000)

    def test_rejected_execute_writes_nothing(self):
        ledger = seeded_ledger(ceiling=10)
        pending = compute_add_listing(ledger, "alice", 8, 100)
        ledger.set_capacity_ceiling(OWNER, 5)
        before = ledger.snapshot()
        assert ledger.execute(pending) == ExecuteResult.REJECTED
        assert ledger.snapshot() == before
        assert ledger.transaction_log == []
