"""Plain keyed object storage for avatars and attachments.

Unlike ContentStore, keys here are chosen by the caller (an avatar hash, an
attachment UUID path) and content is not checked against them. Writes still
go through the backend's commit step, so a failed upload never leaves a
partial object behind.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import BinaryIO

from contentstore.contracts.backend import Backend
from contentstore.contracts.errors import BackendUnavailableError, ObjectNotFoundError
from contentstore.core.integrity import DEFAULT_CHUNK_SIZE
from contentstore.core.logging import get_logger
from contentstore.core.streams import open_scoped_reader

__all__ = ["ObjectBucket"]

logger = get_logger(__name__)


class ObjectBucket:
    """Keyed object storage over a Backend."""

    def __init__(self, backend: Backend, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.backend = backend
        self.chunk_size = chunk_size

    def upload(self, key: str, stream: BinaryIO, *, head: bytes = b"") -> int:
        """Write head followed by stream under key.

        head carries bytes the caller already consumed from the upload (for
        example while sniffing the content type).

        Returns:
            Number of bytes written, head included. Counted while writing so
            a concurrent delete after commit cannot fail the upload.
        """
        written = 0
        with self.backend.open() as handle:
            with handle.new_writer(key) as writer:
                if head:
                    writer.write(head)
                    written += len(head)
                while True:
                    chunk = stream.read(self.chunk_size)
                    if not chunk:
                        break
                    writer.write(chunk)
                    written += len(chunk)
                writer.commit()
        logger.debug("Uploaded object", key=key, size=written)
        return written

    def open(self, key: str) -> BinaryIO:
        """Open key for reading. The caller must close the stream.

        Raises:
            ObjectNotFoundError: If key is absent
        """
        return open_scoped_reader(self.backend, key, buffer_size=self.chunk_size)

    def exists(self, key: str) -> bool:
        """Return True if key is stored. Backend failures are logged and reported as False."""
        try:
            with self.backend.open() as handle:
                return handle.exists(key)
        except BackendUnavailableError as e:
            logger.error("Existence check failed", key=key, error=str(e))
            return False

    def size(self, key: str) -> int:
        """Return the stored size of key.

        Raises:
            ObjectNotFoundError: If key is absent
        """
        with self.backend.open() as handle:
            return handle.stat_size(key)

    def delete(self, key: str, *, missing_ok: bool = True) -> None:
        """Delete key.

        Raises:
            ObjectNotFoundError: If key is absent and missing_ok is False
        """
        with self.backend.open() as handle:
            if not missing_ok and not handle.exists(key):
                raise ObjectNotFoundError(key)
            handle.delete(key)

    def delete_many(self, keys: Iterable[str]) -> int:
        """Delete every present key, stopping at the first backend failure.

        Returns:
            Number of objects removed
        """
        removed = 0
        with self.backend.open() as handle:
            for key in keys:
                if handle.exists(key):
                    handle.delete(key)
                    removed += 1
        logger.debug("Deleted objects", count=removed)
        return removed
