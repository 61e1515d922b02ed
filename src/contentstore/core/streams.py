"""Read streams that own the backend handle they were opened from."""

from __future__ import annotations

import io
from typing import BinaryIO, cast

from contentstore.contracts.backend import Backend, BackendHandle

__all__ = ["ScopedReader", "open_scoped_reader"]


class ScopedReader(io.RawIOBase):
    """Raw stream that closes its backend handle when it is closed.

    Streams handed back to callers outlive the operation that opened them,
    so the handle has to live exactly as long as the stream does.
    """

    def __init__(self, inner: BinaryIO, handle: BackendHandle) -> None:
        super().__init__()
        self._inner = inner
        self._handle = handle

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: memoryview) -> int:  # type: ignore[override]
        data = self._inner.read(len(buffer))
        n = len(data)
        buffer[:n] = data
        return n

    def close(self) -> None:
        if self.closed:
            return
        try:
            self._inner.close()
        finally:
            self._handle.close()
            super().close()


def open_scoped_reader(backend: Backend, key: str, offset: int = 0, *, buffer_size: int = io.DEFAULT_BUFFER_SIZE) -> BinaryIO:
    """Open a handle and a reader on key; closing the reader closes the handle.

    If the reader cannot be opened the handle is closed before the error
    propagates.
    """
    handle = backend.open()
    try:
        reader = handle.new_reader(key, offset)
    except BaseException:
        handle.close()
        raise
    return cast(BinaryIO, io.BufferedReader(ScopedReader(reader, handle), buffer_size=buffer_size))
