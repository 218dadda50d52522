"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the marketplace ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. test_capacity_invariant.py - Capacity counter tracks listings and respects the ceiling
2. test_non_negativity.py - No participant balance or listing goes negative
3. test_conservation.py - Money and hours are neither created nor destroyed
4. test_atomicity.py - Failed operations leave every map and counter unchanged

These tests use hypothesis for property-based testing.
"""
