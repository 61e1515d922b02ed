"""Backend selection.

A store path is either an absolute directory (always served from local
disk) or a path relative to the shared bucket URL, in which case it becomes
a key prefix inside that bucket:

    /var/lib/lfs                         -> LocalBackend(/var/lib/lfs)
    data/lfs + file:///srv/storage       -> LocalBackend(/srv/storage/data/lfs)
    data/lfs + mem://test                -> MemoryBackend("test") under data/lfs/
    data/lfs + azblob://objects          -> Azure container "objects" under data/lfs/

Resolution happens once, when settings are turned into stores.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from urllib.parse import urlsplit

from contentstore.contracts.backend import Backend
from contentstore.core.backends.azure_auth import AzureAuthConfig
from contentstore.core.backends.local import LocalBackend
from contentstore.core.backends.memory import get_named_backend
from contentstore.core.backends.prefixed import PrefixedBackend

__all__ = ["SUPPORTED_SCHEMES", "open_backend"]

SUPPORTED_SCHEMES = frozenset({"file", "mem", "azblob"})


def open_backend(root: str | Path, bucket_url: str, azure: AzureAuthConfig | None = None) -> Backend:
    """Resolve a store path and bucket URL to a backend.

    Args:
        root: Absolute directory, or a path relative to the bucket
        bucket_url: Shared bucket used for relative roots (file://, mem://, azblob://)
        azure: Credentials, required only for azblob:// buckets

    Returns:
        Backend rooted at the resolved location

    Raises:
        ValueError: If the URL scheme is unsupported, a file:// URL names a
            host other than localhost, or azblob:// lacks credentials
    """
    root_path = Path(root)
    if root_path.is_absolute():
        return LocalBackend(root_path)

    prefix = PurePosixPath(root_path.as_posix()).as_posix()
    if prefix == ".":
        prefix = ""

    parsed = urlsplit(bucket_url)
    scheme = parsed.scheme.lower()

    if scheme == "file":
        # file://host/dir names a remote host, not /dir on this machine
        if parsed.netloc not in ("", "localhost"):
            raise ValueError(f"file:// bucket URL must not name a host, got {parsed.netloc!r} in {bucket_url!r}. Use file:///abs/dir")
        if not parsed.path:
            raise ValueError(f"file:// bucket URL needs an absolute path, got {bucket_url!r}")
        return LocalBackend(Path(parsed.path) / prefix if prefix else Path(parsed.path))

    backend: Backend
    if scheme == "mem":
        backend = get_named_backend(parsed.netloc)
    elif scheme == "azblob":
        if azure is None:
            raise ValueError("azblob:// bucket URL requires storage.azure credentials")
        from contentstore.core.backends.azure import AzureBlobBackend

        backend = AzureBlobBackend(azure, parsed.netloc)
    else:
        raise ValueError(f"Unsupported bucket URL scheme {scheme!r} in {bucket_url!r}. Supported: {', '.join(sorted(SUPPORTED_SCHEMES))}")

    return PrefixedBackend(backend, prefix) if prefix else backend
