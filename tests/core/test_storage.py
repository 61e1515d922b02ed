# tests/core/test_storage.py
"""Tests for building the deployment's stores from settings."""

import io
import json
from pathlib import Path

import pytest

from contentstore.core.backends.local import LocalBackend
from contentstore.core.backends.memory import get_named_backend
from contentstore.core.config import ContentStoreSettings, StorageSettings
from contentstore.core.logging import configure_logging
from contentstore.core.storage import Storage
from tests.conftest import descriptor_for


def test_relative_paths_share_one_bucket() -> None:
    settings = ContentStoreSettings(storage=StorageSettings(bucket_url="mem://storage-wiring"))

    storage = Storage.from_settings(settings)
    content = b"lfs content"
    storage.lfs.put(descriptor_for(content), io.BytesIO(content))
    storage.avatars.upload("abc123", io.BytesIO(b"avatar"))
    storage.attachments.upload("1/b/1b26", io.BytesIO(b"attachment"))
    storage.repository_avatars.upload("def456", io.BytesIO(b"repo avatar"))

    oid = descriptor_for(content).oid
    assert get_named_backend("storage-wiring").keys() == sorted(
        [
            f"data/lfs/{oid[0:2]}/{oid[2:4]}/{oid[4:]}",
            "data/avatars/abc123",
            "data/attachments/1/b/1b26",
            "data/repo-avatars/def456",
        ]
    )


def test_absolute_path_is_local(tmp_path: Path) -> None:
    settings = ContentStoreSettings(
        storage=StorageSettings(bucket_url="mem://unused"),
        lfs_content_path=tmp_path / "lfs",
    )

    storage = Storage.from_settings(settings)

    assert isinstance(storage.lfs.backend, LocalBackend)
    assert storage.lfs.backend.root == tmp_path / "lfs"


def test_store_options_flow_from_settings() -> None:
    settings = ContentStoreSettings(
        storage=StorageSettings(bucket_url="mem://options"),
        chunk_size=4096,
        verify_content_hash=True,
        exists_fail_open=False,
    )

    storage = Storage.from_settings(settings)

    assert storage.lfs.chunk_size == 4096
    assert storage.lfs.verify_content_hash is True
    assert storage.lfs.exists_fail_open is False
    assert storage.avatars.chunk_size == 4096


def test_resolved_locations_are_logged(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(json_output=True, level="DEBUG")
    settings = ContentStoreSettings(
        storage=StorageSettings(bucket_url="mem://storage-describe"),
        avatar_upload_path=tmp_path / "avatars",
    )

    Storage.from_settings(settings)

    records = [json.loads(line) for line in capsys.readouterr().err.strip().splitlines() if line.startswith("{")]
    configured = next(r for r in records if r["event"] == "Configured stores")
    assert configured["lfs"] == "mem://storage-describe/data/lfs"
    assert configured["attachments"] == "mem://storage-describe/data/attachments"
    assert configured["avatars"] == f"file://{tmp_path / 'avatars'}"
    assert configured["repository_avatars"] == "mem://storage-describe/data/repo-avatars"
