"""Base classes for backend handles and writers.

Concrete backends inherit the context-manager plumbing from here and
implement the storage operations themselves.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import BinaryIO, Self

from contentstore.contracts.backend import ObjectWriter
from contentstore.contracts.errors import ReadRangeError


class BaseObjectWriter(ABC):
    """Writer that aborts itself when left without a commit.

    Subclasses implement _write, _commit and _abort. State tracking lives
    here so abort() after commit() (or twice) is a no-op.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    def write(self, data: bytes) -> int:
        if self._finished:
            raise ValueError(f"Writer for {self.key} is already closed")
        return self._write(data)

    def commit(self) -> None:
        if self._finished:
            raise ValueError(f"Writer for {self.key} is already closed")
        try:
            self._commit()
        except BaseException:
            self.abort()
            raise
        self._finished = True

    def abort(self) -> None:
        if self._finished:
            return
        self._finished = True
        self._abort()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.abort()

    @abstractmethod
    def _write(self, data: bytes) -> int: ...

    @abstractmethod
    def _commit(self) -> None: ...

    @abstractmethod
    def _abort(self) -> None: ...


class BaseBackendHandle(ABC):
    """Handle with idempotent close() and context-manager support."""

    def __init__(self) -> None:
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._close()

    def _close(self) -> None:  # noqa: B027 - optional hook, most handles hold nothing
        pass

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @abstractmethod
    def exists(self, key: str) -> bool: ...

    @abstractmethod
    def stat_size(self, key: str) -> int: ...

    @abstractmethod
    def new_reader(self, key: str, offset: int = 0) -> BinaryIO: ...

    @abstractmethod
    def new_writer(self, key: str) -> ObjectWriter: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...


def check_range(offset: int, size: int) -> None:
    """Raise ReadRangeError unless 0 <= offset <= size."""
    if offset < 0 or offset > size:
        raise ReadRangeError(offset, size)
