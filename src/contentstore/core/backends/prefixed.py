"""Backend wrapper that scopes every key under a fixed prefix.

Lets one bucket hold several logical stores (lfs/, attachments/, avatars/)
side by side.
"""

from __future__ import annotations

from typing import BinaryIO

from contentstore.contracts.backend import Backend, BackendHandle, ObjectWriter
from contentstore.core.backends.base import BaseBackendHandle

__all__ = ["PrefixedBackend"]


class _PrefixedHandle(BaseBackendHandle):
    def __init__(self, inner: BackendHandle, prefix: str) -> None:
        super().__init__()
        self._inner = inner
        self._prefix = prefix

    def _full(self, key: str) -> str:
        return f"{self._prefix}/{key}"

    def exists(self, key: str) -> bool:
        return self._inner.exists(self._full(key))

    def stat_size(self, key: str) -> int:
        return self._inner.stat_size(self._full(key))

    def new_reader(self, key: str, offset: int = 0) -> BinaryIO:
        return self._inner.new_reader(self._full(key), offset)

    def new_writer(self, key: str) -> ObjectWriter:
        return self._inner.new_writer(self._full(key))

    def delete(self, key: str) -> None:
        self._inner.delete(self._full(key))

    def _close(self) -> None:
        self._inner.close()


class PrefixedBackend:
    """Backend whose keys all live under prefix/ in an inner backend."""

    def __init__(self, inner: Backend, prefix: str) -> None:
        normalized = prefix.strip("/")
        if not normalized:
            raise ValueError("PrefixedBackend requires a non-empty prefix")
        self.inner = inner
        self.prefix = normalized

    def open(self) -> _PrefixedHandle:
        return _PrefixedHandle(self.inner.open(), self.prefix)

    def describe(self) -> str:
        return f"{self.inner.describe().rstrip('/')}/{self.prefix}"
