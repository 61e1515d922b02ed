# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Usage:
    from tests.property.conftest import binary_content, sha256_oids

    @given(content=binary_content)
    def test_put_get_roundtrip(content: bytes) -> None:
        ...
"""

from __future__ import annotations

from hypothesis import strategies as st

# Arbitrary object bodies, including empty ones
binary_content = st.binary(min_size=0, max_size=4096)

nonempty_binary = st.binary(min_size=1, max_size=4096)

# Full-length lowercase hex digests
sha256_oids = st.text(alphabet="0123456789abcdef", min_size=64, max_size=64)

# Any lowercase hex identifier, including ones too short to shard
hex_oids = st.text(alphabet="0123456789abcdef", min_size=0, max_size=80)

chunk_sizes = st.integers(min_value=1, max_value=512)
