"""Local directory backend.

Objects are plain files under a root directory, one file per key. Writes go
to a hidden temp file in the destination directory and are moved into place
with os.replace() on commit, so readers never see a partial object and
concurrent writers of the same key each publish a complete file.

Structure: root/ab/cd/ef0123...
"""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path
from typing import BinaryIO

from contentstore.contracts.errors import BackendUnavailableError, ObjectNotFoundError
from contentstore.core.backends.base import BaseBackendHandle, BaseObjectWriter, check_range

__all__ = ["LocalBackend"]

_TEMP_PREFIX = ".tmp-"


class _LocalWriter(BaseObjectWriter):
    """Temp-file-then-rename writer."""

    def __init__(self, key: str, path: Path) -> None:
        super().__init__(key)
        self._path = path
        try:
            path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
            fd, tmp_name = tempfile.mkstemp(prefix=_TEMP_PREFIX, dir=path.parent)
        except OSError as e:
            raise BackendUnavailableError(f"Cannot create writer for {key} in {path.parent}: {e}") from e
        self._tmp_path = Path(tmp_name)
        self._file = os.fdopen(fd, "wb")

    def _write(self, data: bytes) -> int:
        try:
            return self._file.write(data)
        except OSError as e:
            raise BackendUnavailableError(f"Write failed for {self.key}: {e}") from e

    def _commit(self) -> None:
        try:
            self._file.flush()
            os.fsync(self._file.fileno())
            self._file.close()
            os.replace(self._tmp_path, self._path)
        except OSError as e:
            raise BackendUnavailableError(f"Commit failed for {self.key}: {e}") from e

    def _abort(self) -> None:
        self._file.close()
        self._tmp_path.unlink(missing_ok=True)


class _LocalHandle(BaseBackendHandle):
    def __init__(self, root: Path) -> None:
        super().__init__()
        self._root = root

    def _path_for_key(self, key: str) -> Path:
        """Resolve key under the root, refusing anything that escapes it.

        Raises:
            ValueError: If key is empty, absolute, or resolves outside the root
        """
        if not key or key.startswith("/"):
            raise ValueError(f"Invalid key: {key!r}")
        path = self._root / key
        base_resolved = self._root.resolve()
        if not path.resolve().is_relative_to(base_resolved):
            raise ValueError(f"Invalid key: path traversal detected for {key!r}")
        return path

    def _stat(self, key: str) -> os.stat_result | None:
        path = self._path_for_key(key)
        try:
            st = path.stat()
        except (FileNotFoundError, NotADirectoryError):
            return None
        except OSError as e:
            raise BackendUnavailableError(f"Cannot stat {path}: {e}") from e
        # Shard directories share the key namespace; only files are objects
        if not stat.S_ISREG(st.st_mode):
            return None
        return st

    def exists(self, key: str) -> bool:
        return self._stat(key) is not None

    def stat_size(self, key: str) -> int:
        st = self._stat(key)
        if st is None:
            raise ObjectNotFoundError(key)
        return st.st_size

    def new_reader(self, key: str, offset: int = 0) -> BinaryIO:
        path = self._path_for_key(key)
        try:
            f = path.open("rb")
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError):
            raise ObjectNotFoundError(key) from None
        except OSError as e:
            raise BackendUnavailableError(f"Cannot open {path}: {e}") from e
        try:
            check_range(offset, os.fstat(f.fileno()).st_size)
            f.seek(offset)
        except BaseException:
            f.close()
            raise
        return f

    def new_writer(self, key: str) -> _LocalWriter:
        return _LocalWriter(key, self._path_for_key(key))

    def delete(self, key: str) -> None:
        path = self._path_for_key(key)
        try:
            path.unlink(missing_ok=True)
        except IsADirectoryError:
            # A shard directory, not an object: nothing to delete
            return
        except OSError as e:
            raise BackendUnavailableError(f"Cannot delete {path}: {e}") from e


class LocalBackend:
    """Backend storing objects as files under root."""

    def __init__(self, root: Path) -> None:
        """Initialize local backend.

        Args:
            root: Directory holding all objects. Created on first open().
        """
        self.root = root

    def open(self) -> _LocalHandle:
        try:
            self.root.mkdir(parents=True, exist_ok=True, mode=0o700)
        except OSError as e:
            raise BackendUnavailableError(f"Failed to create '{self.root}': {e}") from e
        if not self.root.is_dir():
            raise BackendUnavailableError(f"Storage root is not a directory: {self.root}")
        return _LocalHandle(self.root)

    def describe(self) -> str:
        return f"file://{self.root}"
