# tests/property/__init__.py
"""Property-based tests for contentstore.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of. For a verified store that means
byte-exact round trips and no visible object after a rejected put.

Test categories:
- core/: Key layout and content store round-trip/rejection properties
"""
