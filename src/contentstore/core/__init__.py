"""Core infrastructure: content store, keyed buckets, backends, configuration, logging."""

from contentstore.core.bucket import ObjectBucket
from contentstore.core.config import (
    ContentStoreSettings,
    StorageSettings,
    load_settings,
)
from contentstore.core.content_store import ContentStore
from contentstore.core.integrity import (
    DEFAULT_CHUNK_SIZE,
    IntegrityVerifier,
    copy_verified,
    hash_stream,
)
from contentstore.core.keys import (
    attachment_key,
    is_valid_oid,
    transform_key,
)
from contentstore.core.logging import (
    configure_logging,
    get_logger,
)
from contentstore.core.storage import Storage

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "ContentStore",
    "ContentStoreSettings",
    "IntegrityVerifier",
    "ObjectBucket",
    "Storage",
    "StorageSettings",
    "attachment_key",
    "configure_logging",
    "copy_verified",
    "get_logger",
    "hash_stream",
    "is_valid_oid",
    "load_settings",
    "transform_key",
]
