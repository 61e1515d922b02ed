"""Backend protocols for pluggable object storage.

These protocols define the capability set every storage target provides:
- core/backends/local.py (LocalBackend, a directory tree)
- core/backends/memory.py (MemoryBackend, process-local buckets)
- core/backends/azure.py (AzureBlobBackend, Azure Blob Storage)

Consolidated here so the content store and the keyed buckets depend on the
capability, never on a concrete target.
"""

from __future__ import annotations

from types import TracebackType
from typing import BinaryIO, Protocol, Self, runtime_checkable


@runtime_checkable
class ObjectWriter(Protocol):
    """Sink for a single object.

    Nothing written becomes visible to exists() or new_reader() until
    commit() returns. Leaving the context without committing aborts.
    """

    def write(self, data: bytes) -> int:
        """Append bytes to the pending object.

        Returns:
            Number of bytes accepted
        """
        ...

    def commit(self) -> None:
        """Atomically publish everything written so far under the key.

        Raises:
            BackendUnavailableError: If the object could not be published
        """
        ...

    def abort(self) -> None:
        """Discard everything written. Safe to call more than once."""
        ...

    def __enter__(self) -> Self: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


@runtime_checkable
class BackendHandle(Protocol):
    """Scoped session against a storage target.

    Acquired immediately before use and closed on every exit path of the
    operation that opened it. Handles are never shared across operations.
    """

    def exists(self, key: str) -> bool:
        """Check whether a key holds a committed object.

        Returns:
            True if the object exists, False if it does not

        Raises:
            BackendUnavailableError: On transport or permission failures
        """
        ...

    def stat_size(self, key: str) -> int:
        """Return the stored size of an object in bytes.

        Raises:
            ObjectNotFoundError: If the key is absent
            BackendUnavailableError: On transport or permission failures
        """
        ...

    def new_reader(self, key: str, offset: int = 0) -> BinaryIO:
        """Open a stream from offset through the end of the object.

        Args:
            key: Backend-relative key
            offset: First byte to return; equal to the size yields an empty stream

        Raises:
            ObjectNotFoundError: If the key is absent
            ReadRangeError: If offset is negative or beyond the stored size
            BackendUnavailableError: On transport or permission failures
        """
        ...

    def new_writer(self, key: str) -> ObjectWriter:
        """Open a writer that publishes to key on commit."""
        ...

    def delete(self, key: str) -> None:
        """Remove an object. Deleting an absent key is not an error."""
        ...

    def close(self) -> None:
        """Release the session. Safe to call more than once."""
        ...

    def __enter__(self) -> Self: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


@runtime_checkable
class Backend(Protocol):
    """A configured storage target.

    Built once at startup from settings and read-only thereafter.
    """

    def open(self) -> BackendHandle:
        """Open a scoped handle against the target.

        Raises:
            BackendUnavailableError: If the target cannot be reached or created
        """
        ...

    def describe(self) -> str:
        """Human-readable location of the target, logged when stores are built."""
        ...
