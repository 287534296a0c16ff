"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the launcher.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. invariants.py - Supply cap, derived price, bookkeeping vs. substrate
2. atomicity.py - All-or-nothing operations, compensation of partial effects
3. pricing_properties.py - Monotone curve, round-trip friction
4. authorization.py - Controller-only withdrawal

These tests use hypothesis for property-based testing.
"""
