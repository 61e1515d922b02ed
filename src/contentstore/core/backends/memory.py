"""In-memory backend (mem:// buckets).

Objects live in a dict shared by every handle of the backend. Writers
buffer privately and publish under the lock on commit, which gives the
same all-or-nothing visibility as the durable backends. Intended for tests
and throwaway deployments; contents vanish with the process.
"""

from __future__ import annotations

import io
import threading
from typing import BinaryIO

from contentstore.contracts.errors import ObjectNotFoundError
from contentstore.core.backends.base import BaseBackendHandle, BaseObjectWriter, check_range

__all__ = ["MemoryBackend", "get_named_backend"]


class _MemoryWriter(BaseObjectWriter):
    def __init__(self, key: str, backend: MemoryBackend) -> None:
        super().__init__(key)
        self._backend = backend
        self._buffer = io.BytesIO()

    def _write(self, data: bytes) -> int:
        return self._buffer.write(data)

    def _commit(self) -> None:
        self._backend._publish(self.key, self._buffer.getvalue())
        self._buffer.close()

    def _abort(self) -> None:
        self._buffer.close()


class _MemoryHandle(BaseBackendHandle):
    def __init__(self, backend: MemoryBackend) -> None:
        super().__init__()
        self._backend = backend

    def exists(self, key: str) -> bool:
        with self._backend._lock:
            return key in self._backend._objects

    def stat_size(self, key: str) -> int:
        return len(self._get(key))

    def new_reader(self, key: str, offset: int = 0) -> BinaryIO:
        data = self._get(key)
        check_range(offset, len(data))
        return io.BytesIO(data[offset:])

    def new_writer(self, key: str) -> _MemoryWriter:
        return _MemoryWriter(key, self._backend)

    def delete(self, key: str) -> None:
        with self._backend._lock:
            self._backend._objects.pop(key, None)

    def _get(self, key: str) -> bytes:
        with self._backend._lock:
            try:
                return self._backend._objects[key]
            except KeyError:
                raise ObjectNotFoundError(key) from None


class MemoryBackend:
    """Backend holding objects in process memory."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._lock = threading.Lock()
        self._objects: dict[str, bytes] = {}

    def open(self) -> _MemoryHandle:
        return _MemoryHandle(self)

    def describe(self) -> str:
        return f"mem://{self.name}"

    def keys(self) -> list[str]:
        """Snapshot of committed keys, sorted."""
        with self._lock:
            return sorted(self._objects)

    def _publish(self, key: str, data: bytes) -> None:
        with self._lock:
            self._objects[key] = data


# mem://<name> resolves to the same bucket everywhere in the process
_named_backends: dict[str, MemoryBackend] = {}
_named_lock = threading.Lock()


def get_named_backend(name: str) -> MemoryBackend:
    """Return the process-wide MemoryBackend registered under name."""
    with _named_lock:
        backend = _named_backends.get(name)
        if backend is None:
            backend = MemoryBackend(name)
            _named_backends[name] = backend
        return backend
