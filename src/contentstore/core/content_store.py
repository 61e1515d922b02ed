# src/contentstore/core/content_store.py
"""
Content-addressable store for Git LFS objects.

Objects are stored under their SHA-256 digest, sharded by transform_key().
Every put is verified before it is committed:
- Size and digest are computed in one streaming pass while the bytes flow
  into the backend writer
- A mismatch aborts the writer, so nothing is ever visible under the key
- Reads are trusted after write and are not re-hashed; verify(full=True)
  re-hashes on demand
"""

from __future__ import annotations

import hmac
from typing import BinaryIO

from contentstore.contracts.backend import Backend
from contentstore.contracts.descriptor import ObjectDescriptor
from contentstore.contracts.errors import (
    BackendUnavailableError,
    HashMismatchError,
    KeyCollisionError,
    ObjectNotFoundError,
    SizeMismatchError,
)
from contentstore.core.integrity import DEFAULT_CHUNK_SIZE, IntegrityVerifier, copy_verified, hash_stream
from contentstore.core.keys import is_valid_oid, transform_key
from contentstore.core.logging import get_logger
from contentstore.core.streams import open_scoped_reader

__all__ = ["ContentStore"]

logger = get_logger(__name__)


class ContentStore:
    """Verified, content-addressed object store over a Backend.

    Structure: <backend root>/ab/cd/ef0123...
    """

    def __init__(
        self,
        backend: Backend,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        verify_content_hash: bool = False,
        exists_fail_open: bool = True,
    ) -> None:
        """Initialize the content store.

        Args:
            backend: Storage target, opened once per operation
            chunk_size: Bytes per read when streaming objects
            verify_content_hash: Default for verify(); True re-hashes stored content
            exists_fail_open: If True, exists() reports backend failures as absent
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.backend = backend
        self.chunk_size = chunk_size
        self.verify_content_hash = verify_content_hash
        self.exists_fail_open = exists_fail_open

    def _key_for(self, descriptor: ObjectDescriptor) -> str:
        """Validate the identifier and return its storage key.

        Raises:
            ValueError: If oid is not a non-empty lowercase hex string
        """
        if not is_valid_oid(descriptor.oid):
            raise ValueError(f"Invalid oid: must be lowercase hex characters, got {repr(descriptor.oid)[:80]}")
        return transform_key(descriptor.oid)

    def put(self, descriptor: ObjectDescriptor, stream: BinaryIO) -> None:
        """Stream content into the store, committing only if it matches descriptor.

        If an object is already stored under the key with the declared size,
        the new bytes are verified and then discarded.

        Raises:
            SizeMismatchError: If the stream length differs from descriptor.size
            HashMismatchError: If the stream digest differs from descriptor.oid
            KeyCollisionError: If the key holds an object of a different size
            BackendUnavailableError: If the backend fails
        """
        key = self._key_for(descriptor)
        verifier = IntegrityVerifier()
        log = logger.bind(oid=descriptor.oid, key=key)

        with self.backend.open() as handle, handle.new_writer(key) as writer:
            seen = copy_verified(stream, writer, verifier, chunk_size=self.chunk_size, limit=descriptor.size)
            if seen != descriptor.size:
                log.warning("Rejected put: size mismatch", expected=descriptor.size, actual=seen)
                raise SizeMismatchError(descriptor.oid, descriptor.size, seen)

            digest = verifier.hexdigest()
            if not hmac.compare_digest(digest, descriptor.oid):
                log.warning("Rejected put: hash mismatch", actual=digest)
                raise HashMismatchError(descriptor.oid, digest)

            try:
                stored_size: int | None = handle.stat_size(key)
            except ObjectNotFoundError:
                stored_size = None

            if stored_size is not None:
                if stored_size != descriptor.size:
                    log.error("Key collision suspected", stored_size=stored_size, size=descriptor.size)
                    raise KeyCollisionError(descriptor.oid, key, stored_size)
                # Leaving the block aborts the writer; the stored copy stands
                log.debug("Object already present", size=stored_size)
                return

            writer.commit()
            log.debug("Stored object", size=descriptor.size)

    def get(self, descriptor: ObjectDescriptor, from_byte: int = 0) -> BinaryIO:
        """Open the stored object for reading from from_byte to the end.

        The caller must close the returned stream. Content is not re-hashed.

        Raises:
            ObjectNotFoundError: If the object is absent
            ReadRangeError: If from_byte is negative or beyond the object size
            BackendUnavailableError: If the backend fails
        """
        key = self._key_for(descriptor)
        return open_scoped_reader(self.backend, key, from_byte, buffer_size=self.chunk_size)

    def exists(self, descriptor: ObjectDescriptor) -> bool:
        """Check whether the object is stored. Size and hash are not checked.

        With exists_fail_open (the default) a backend failure is logged and
        reported as False, which callers cannot tell apart from absence.

        Raises:
            BackendUnavailableError: Only when exists_fail_open is False
        """
        key = self._key_for(descriptor)
        try:
            with self.backend.open() as handle:
                return handle.exists(key)
        except BackendUnavailableError as e:
            if not self.exists_fail_open:
                raise
            logger.warning("Existence check failed, reporting absent", oid=descriptor.oid, error=str(e))
            return False

    def verify(self, descriptor: ObjectDescriptor, *, full: bool | None = None) -> bool:
        """Check the stored object against descriptor.

        The stored size is always compared. The digest is compared only when
        full is True (or full is None and verify_content_hash is set), which
        streams the whole object once.

        Returns:
            False on mismatch, True otherwise

        Raises:
            ObjectNotFoundError: If the object is absent
            BackendUnavailableError: If the backend fails
        """
        key = self._key_for(descriptor)
        check_hash = self.verify_content_hash if full is None else full

        with self.backend.open() as handle:
            stored_size = handle.stat_size(key)
            if stored_size != descriptor.size:
                logger.info("Verify failed: size mismatch", oid=descriptor.oid, expected=descriptor.size, actual=stored_size)
                return False
            if not check_hash:
                return True
            with handle.new_reader(key) as reader:
                verifier = hash_stream(reader, chunk_size=self.chunk_size)

        if not verifier.matches(descriptor.oid, descriptor.size):
            logger.info("Verify failed: content mismatch", oid=descriptor.oid, actual=verifier.hexdigest(), size=verifier.byte_count)
            return False
        return True

    def delete(self, descriptor: ObjectDescriptor) -> None:
        """Remove the object. Deleting an absent object is not an error."""
        key = self._key_for(descriptor)
        with self.backend.open() as handle:
            handle.delete(key)
        logger.debug("Deleted object", oid=descriptor.oid, key=key)
