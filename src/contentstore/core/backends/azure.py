"""Azure Blob Storage backend.

Each key is a block blob in one container. Writers stage fixed-size blocks
and publish them with a single commit_block_list() call; staged blocks are
invisible until then, so an aborted or failed put leaves nothing behind
except uncommitted blocks, which the service discards on its own.

Three-tier trust model:
    - Azure Blob SDK calls = EXTERNAL SYSTEM -> wrap with try/except, map to our errors
    - Key handling and chunking = OUR CODE -> let it crash
"""

from __future__ import annotations

import base64
import io
import uuid
from collections.abc import Iterator
from typing import TYPE_CHECKING, BinaryIO, cast

from azure.core.exceptions import AzureError, ResourceNotFoundError

from contentstore.contracts.errors import BackendUnavailableError, ObjectNotFoundError
from contentstore.core.backends.azure_auth import AzureAuthConfig
from contentstore.core.backends.base import BaseBackendHandle, BaseObjectWriter, check_range
from contentstore.core.logging import get_logger

if TYPE_CHECKING:
    from azure.storage.blob import BlobClient, BlobServiceClient, ContainerClient

__all__ = ["DEFAULT_BLOCK_SIZE", "AzureBlobBackend"]

logger = get_logger(__name__)

# Azure accepts blocks up to 4000 MiB; 4 MiB keeps memory flat and requests small
DEFAULT_BLOCK_SIZE = 4 * 1024 * 1024


class _ChunkReader(io.RawIOBase):
    """Raw stream over a download's chunk iterator."""

    def __init__(self, key: str, chunks: Iterator[bytes]) -> None:
        super().__init__()
        self._key = key
        self._chunks = chunks
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: memoryview) -> int:  # type: ignore[override]
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
            except AzureError as e:
                raise BackendUnavailableError(f"Download failed for {self._key}: {e}") from e
        n = min(len(buffer), len(self._pending))
        buffer[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        return n


class _AzureBlockWriter(BaseObjectWriter):
    """Block-staging writer; commit_block_list() is the only visible step."""

    def __init__(self, key: str, blob_client: BlobClient, block_size: int) -> None:
        super().__init__(key)
        self._blob_client = blob_client
        self._block_size = block_size
        self._buffer = bytearray()
        # Block IDs are per-blob; a per-writer nonce keeps concurrent writers apart
        self._nonce = uuid.uuid4().hex
        self._block_ids: list[str] = []

    def _write(self, data: bytes) -> int:
        self._buffer.extend(data)
        while len(self._buffer) >= self._block_size:
            self._stage(bytes(self._buffer[: self._block_size]))
            del self._buffer[: self._block_size]
        return len(data)

    def _stage(self, block: bytes) -> None:
        raw_id = f"{self._nonce}-{len(self._block_ids):08d}"
        block_id = base64.b64encode(raw_id.encode("ascii")).decode("ascii")
        try:
            self._blob_client.stage_block(block_id=block_id, data=block, length=len(block))
        except AzureError as e:
            raise BackendUnavailableError(f"Failed to stage block for {self.key}: {e}") from e
        self._block_ids.append(block_id)

    def _commit(self) -> None:
        from azure.storage.blob import BlobBlock

        if self._buffer:
            self._stage(bytes(self._buffer))
            self._buffer.clear()
        try:
            self._blob_client.commit_block_list([BlobBlock(block_id=block_id) for block_id in self._block_ids])
        except AzureError as e:
            raise BackendUnavailableError(f"Failed to commit {self.key}: {e}") from e

    def _abort(self) -> None:
        # Uncommitted blocks are garbage-collected by the service
        self._buffer.clear()
        self._block_ids.clear()


class _AzureHandle(BaseBackendHandle):
    def __init__(self, service_client: BlobServiceClient, container_client: ContainerClient, block_size: int) -> None:
        super().__init__()
        self._service_client = service_client
        self._container_client = container_client
        self._block_size = block_size

    def _blob(self, key: str) -> BlobClient:
        return self._container_client.get_blob_client(key)

    def exists(self, key: str) -> bool:
        try:
            return bool(self._blob(key).exists())
        except AzureError as e:
            raise BackendUnavailableError(f"Existence check failed for {key}: {e}") from e

    def stat_size(self, key: str) -> int:
        try:
            properties = self._blob(key).get_blob_properties()
        except ResourceNotFoundError:
            raise ObjectNotFoundError(key) from None
        except AzureError as e:
            raise BackendUnavailableError(f"Failed to read properties of {key}: {e}") from e
        return int(properties.size)

    def new_reader(self, key: str, offset: int = 0) -> BinaryIO:
        size = self.stat_size(key)
        check_range(offset, size)
        if offset == size:
            # A range starting at EOF is rejected by the service (416)
            return io.BytesIO(b"")
        try:
            downloader = self._blob(key).download_blob(offset=offset)
            chunks = downloader.chunks()
        except ResourceNotFoundError:
            raise ObjectNotFoundError(key) from None
        except AzureError as e:
            raise BackendUnavailableError(f"Download failed for {key}: {e}") from e
        return cast(BinaryIO, io.BufferedReader(_ChunkReader(key, chunks)))

    def new_writer(self, key: str) -> _AzureBlockWriter:
        return _AzureBlockWriter(key, self._blob(key), self._block_size)

    def delete(self, key: str) -> None:
        try:
            self._blob(key).delete_blob()
        except ResourceNotFoundError:
            return
        except AzureError as e:
            raise BackendUnavailableError(f"Failed to delete {key}: {e}") from e

    def _close(self) -> None:
        self._container_client.close()
        self._service_client.close()


class AzureBlobBackend:
    """Backend storing objects as block blobs in an Azure container."""

    def __init__(self, auth: AzureAuthConfig, container: str, *, block_size: int = DEFAULT_BLOCK_SIZE) -> None:
        if not container:
            raise ValueError("Azure container name is required")
        if block_size <= 0:
            raise ValueError(f"block_size must be positive, got {block_size}")
        self.auth = auth
        self.container = container
        self.block_size = block_size

    def open(self) -> _AzureHandle:
        try:
            service_client = self.auth.create_blob_service_client()
            container_client = service_client.get_container_client(self.container)
        except (AzureError, ValueError, ImportError) as e:
            # Malformed connection strings surface as ValueError from the SDK
            raise BackendUnavailableError(f"Could not open container {self.container!r}: {e}") from e
        logger.debug("Opened Azure container", container=self.container, auth_method=self.auth.auth_method)
        return _AzureHandle(service_client, container_client, self.block_size)

    def describe(self) -> str:
        return f"azblob://{self.container}"
