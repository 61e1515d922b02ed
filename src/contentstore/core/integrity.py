"""Streaming integrity verification.

Objects can be many gigabytes, so digests and sizes are always computed in
a single forward pass over fixed-size chunks. Nothing here ever holds a
whole object in memory.
"""

import hashlib
import hmac
from typing import BinaryIO

from contentstore.contracts.backend import ObjectWriter

__all__ = ["DEFAULT_CHUNK_SIZE", "IntegrityVerifier", "copy_verified", "hash_stream"]

DEFAULT_CHUNK_SIZE = 1024 * 1024


class IntegrityVerifier:
    """Running digest and byte count over a stream of chunks."""

    def __init__(self, algorithm: str = "sha256") -> None:
        self._hash = hashlib.new(algorithm)
        self.byte_count = 0

    def update(self, data: bytes) -> None:
        self._hash.update(data)
        self.byte_count += len(data)

    def hexdigest(self) -> str:
        return self._hash.hexdigest()

    def matches(self, expected_oid: str, expected_size: int) -> bool:
        """Check the accumulated bytes against a declared identity.

        Size is compared first since it is free; the digest comparison is
        timing-safe.
        """
        if self.byte_count != expected_size:
            return False
        return hmac.compare_digest(self.hexdigest(), expected_oid)


def copy_verified(
    source: BinaryIO,
    sink: ObjectWriter,
    verifier: IntegrityVerifier,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    limit: int | None = None,
) -> int:
    """Pump source into sink, feeding every chunk through verifier.

    Args:
        source: Readable binary stream, consumed to EOF
        sink: Writer receiving the bytes
        verifier: Accumulator updated with each chunk
        chunk_size: Maximum bytes read per iteration
        limit: Stop as soon as more than this many bytes have been seen

    Returns:
        Bytes seen. Greater than limit only when the copy stopped early.
    """
    while True:
        chunk = source.read(chunk_size)
        if not chunk:
            break
        verifier.update(chunk)
        if limit is not None and verifier.byte_count > limit:
            # Overrun: the put is doomed, don't ship the rest to the backend
            break
        sink.write(chunk)
    return verifier.byte_count


def hash_stream(source: BinaryIO, *, chunk_size: int = DEFAULT_CHUNK_SIZE, algorithm: str = "sha256") -> IntegrityVerifier:
    """Consume source once and return the populated verifier."""
    verifier = IntegrityVerifier(algorithm)
    while True:
        chunk = source.read(chunk_size)
        if not chunk:
            break
        verifier.update(chunk)
    return verifier
