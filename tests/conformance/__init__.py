"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the transaction ledger engine.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. test_balance_invariants.py - total = available + held, monotonic lock,
   dispute lifecycle
2. test_determinism.py - Reproducible behavior, per-client partitioning
3. test_fixed_point.py - Exact decimal round-trip

These tests use hypothesis for property-based testing.
"""
