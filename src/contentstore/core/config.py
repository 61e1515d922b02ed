"""
Configuration schema and loading for contentstore.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction and passed explicitly
to the stores that need them; there is no module-level configuration state.
"""

import os
import re
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator

from contentstore.core.backends.azure_auth import AzureAuthConfig
from contentstore.core.backends.factory import SUPPORTED_SCHEMES
from contentstore.core.integrity import DEFAULT_CHUNK_SIZE

__all__ = ["ContentStoreSettings", "StorageSettings", "load_settings"]


def _default_bucket_url() -> str:
    return f"file://{Path.cwd()}"


class StorageSettings(BaseModel):
    """Shared bucket used by every store path that is not absolute.

    Example YAML:
        storage:
          bucket_url: "azblob://gitea-objects"
          azure:
            connection_string: "${AZURE_STORAGE_CONNECTION_STRING}"
    """

    model_config = {"frozen": True, "extra": "forbid"}

    bucket_url: str = Field(
        default_factory=_default_bucket_url,
        description="Bucket for relative store paths: file:///dir, mem://name or azblob://container",
    )
    azure: AzureAuthConfig | None = Field(
        default=None,
        description="Credentials for azblob:// buckets",
    )

    @field_validator("bucket_url")
    @classmethod
    def validate_bucket_url(cls, v: str) -> str:
        scheme, sep, _ = v.partition("://")
        if not sep or scheme.lower() not in SUPPORTED_SCHEMES:
            raise ValueError(f"bucket_url must start with one of {', '.join(f'{s}://' for s in sorted(SUPPORTED_SCHEMES))}, got {v!r}")
        if scheme.lower() == "file":
            host = urlsplit(v).netloc
            if host not in ("", "localhost"):
                raise ValueError(f"file:// bucket_url must not name a host, got {host!r}. Use file:///abs/dir")
        return v


class ContentStoreSettings(BaseModel):
    """Top-level configuration.

    Each *_path is either an absolute directory (served from local disk) or
    a path relative to storage.bucket_url.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    storage: StorageSettings = Field(
        default_factory=StorageSettings,
        description="Shared bucket configuration",
    )
    lfs_content_path: Path = Field(
        default=Path("data/lfs"),
        description="Where LFS objects are stored",
    )
    attachment_path: Path = Field(
        default=Path("data/attachments"),
        description="Where issue and release attachments are stored",
    )
    avatar_upload_path: Path = Field(
        default=Path("data/avatars"),
        description="Where user avatars are stored",
    )
    repository_avatar_upload_path: Path = Field(
        default=Path("data/repo-avatars"),
        description="Where repository avatars are stored",
    )
    chunk_size: int = Field(
        default=DEFAULT_CHUNK_SIZE,
        gt=0,
        description="Bytes per read/write when streaming objects",
    )
    verify_content_hash: bool = Field(
        default=False,
        description="Make verify() re-hash stored content instead of checking size only",
    )
    exists_fail_open: bool = Field(
        default=True,
        description="Report backend failures during existence checks as 'absent' instead of raising",
    )


# Pattern for ${VAR} or ${VAR:-default}
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Unset variables without a default are left as-is so that validation
    reports them instead of silently using an empty string.
    """

    def replacer(match: re.Match[str]) -> str:
        env_value = os.environ.get(match.group(1))
        if env_value is not None:
            return env_value
        default = match.group(2)
        if default is not None:
            return default
        return match.group(0)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _ENV_VAR_PATTERN.sub(replacer, value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lowercase_keys(value: Any) -> Any:
    """Dynaconf uppercases keys at every level; Pydantic fields are lowercase."""
    if isinstance(value, dict):
        return {str(k).lower(): _lowercase_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_lowercase_keys(item) for item in value]
    return value


def load_settings(config_path: Path | None = None) -> ContentStoreSettings:
    """Load settings from a YAML file with environment variable overrides.

    Precedence, highest first:
    1. Environment variables (CONTENTSTORE_*), e.g. CONTENTSTORE_STORAGE__BUCKET_URL
    2. Config file
    3. Defaults from the Pydantic schema

    Args:
        config_path: YAML file, or None to use environment and defaults only

    Returns:
        Validated ContentStoreSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config_path is given but doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="CONTENTSTORE",
        settings_files=[str(config_path)] if config_path is not None else [],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _lowercase_keys(raw_config)
    raw_config = _expand_env_vars(raw_config)

    return ContentStoreSettings(**raw_config)
