# tests/core/test_config.py
"""Tests for configuration schema and loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from contentstore.core.config import ContentStoreSettings, StorageSettings, _expand_env_vars, load_settings
from contentstore.core.integrity import DEFAULT_CHUNK_SIZE


class TestStorageSettings:
    def test_default_bucket_is_working_directory(self) -> None:
        settings = StorageSettings()

        assert settings.bucket_url == f"file://{Path.cwd()}"
        assert settings.azure is None

    @pytest.mark.parametrize("url", ["file:///srv/data", "mem://test", "azblob://objects", "MEM://upper"])
    def test_supported_schemes(self, url: str) -> None:
        assert StorageSettings(bucket_url=url).bucket_url == url

    @pytest.mark.parametrize("url", ["s3://bucket", "/srv/data", "objects", ""])
    def test_unsupported_bucket_url_rejected(self, url: str) -> None:
        with pytest.raises(ValidationError, match="bucket_url must start with"):
            StorageSettings(bucket_url=url)

    def test_file_bucket_url_with_host_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must not name a host"):
            StorageSettings(bucket_url="file://srv/storage")

    def test_file_bucket_url_localhost_accepted(self) -> None:
        assert StorageSettings(bucket_url="file://localhost/srv/data").bucket_url == "file://localhost/srv/data"

    def test_azure_credentials_validated(self) -> None:
        with pytest.raises(ValidationError, match="No authentication method configured"):
            StorageSettings(bucket_url="azblob://objects", azure={})  # type: ignore[arg-type]


class TestContentStoreSettings:
    def test_defaults(self) -> None:
        settings = ContentStoreSettings()

        assert settings.lfs_content_path == Path("data/lfs")
        assert settings.attachment_path == Path("data/attachments")
        assert settings.avatar_upload_path == Path("data/avatars")
        assert settings.repository_avatar_upload_path == Path("data/repo-avatars")
        assert settings.chunk_size == DEFAULT_CHUNK_SIZE
        assert settings.verify_content_hash is False
        assert settings.exists_fail_open is True

    def test_settings_are_frozen(self) -> None:
        settings = ContentStoreSettings()

        with pytest.raises(ValidationError):
            settings.chunk_size = 1  # type: ignore[misc]

    def test_chunk_size_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ContentStoreSettings(chunk_size=0)

    def test_unknown_fields_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ContentStoreSettings(lfs_path="typo")  # type: ignore[call-arg]


class TestExpandEnvVars:
    def test_set_variable_substituted(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CS_TEST_CONN", "AccountName=dev")

        assert _expand_env_vars({"azure": {"connection_string": "${CS_TEST_CONN}"}}) == {
            "azure": {"connection_string": "AccountName=dev"}
        }

    def test_default_used_when_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CS_TEST_UNSET", raising=False)

        assert _expand_env_vars({"url": "${CS_TEST_UNSET:-mem://fallback}"}) == {"url": "mem://fallback"}

    def test_unset_without_default_left_as_is(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CS_TEST_UNSET", raising=False)

        assert _expand_env_vars({"values": ["${CS_TEST_UNSET}", 3]}) == {"values": ["${CS_TEST_UNSET}", 3]}


class TestLoadSettings:
    """Test Dynaconf-based settings loading."""

    def test_load_without_file_uses_defaults(self) -> None:
        settings = load_settings()

        assert settings.lfs_content_path == Path("data/lfs")

    def test_load_from_yaml_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
storage:
  bucket_url: "mem://configured"
lfs_content_path: "/var/lib/lfs"
chunk_size: 65536
verify_content_hash: true
""")
        settings = load_settings(config_file)

        assert settings.storage.bucket_url == "mem://configured"
        assert settings.lfs_content_path == Path("/var/lib/lfs")
        assert settings.chunk_size == 65536
        assert settings.verify_content_hash is True

    def test_load_with_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
storage:
  bucket_url: "mem://from-file"
""")
        monkeypatch.setenv("CONTENTSTORE_STORAGE__BUCKET_URL", "mem://from-env")

        settings = load_settings(config_file)

        assert settings.storage.bucket_url == "mem://from-env"

    def test_load_expands_env_references(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
storage:
  bucket_url: "azblob://objects"
  azure:
    connection_string: "${CS_TEST_AZURE_CONN}"
""")
        monkeypatch.setenv("CS_TEST_AZURE_CONN", "UseDevelopmentStorage=true")

        settings = load_settings(config_file)

        assert settings.storage.azure is not None
        assert settings.storage.azure.connection_string == "UseDevelopmentStorage=true"

    def test_load_validates_schema(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
storage:
  bucket_url: "s3://not-supported"
""")
        with pytest.raises(ValidationError):
            load_settings(config_file)

    def test_load_missing_file_raises_file_not_found(self, tmp_path: Path) -> None:
        missing_file = tmp_path / "nonexistent.yaml"

        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_settings(missing_file)
