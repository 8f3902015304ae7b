"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the share ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. conservation.py - Double-entry accounting and share backing
2. atomicity.py - A failed call leaves no trace
3. reentrancy.py - Nested calls are refused and roll back the outer call
4. rounding.py - Conversions never favour the caller over the pool

These tests use hypothesis for property-based testing.
"""
