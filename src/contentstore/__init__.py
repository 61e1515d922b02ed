"""
contentstore: content-addressable storage for large binary payloads.

Git LFS objects are stored under their SHA-256 digest and verified on the
way in; avatars and attachments share the same backend abstraction through
plain keyed buckets.
"""

from contentstore.contracts import (
    BackendUnavailableError,
    ContentStoreError,
    HashMismatchError,
    IntegrityError,
    KeyCollisionError,
    ObjectDescriptor,
    ObjectNotFoundError,
    ReadRangeError,
    SizeMismatchError,
)
from contentstore.core.content_store import ContentStore

__version__ = "0.1.0"

__all__ = [
    "BackendUnavailableError",
    "ContentStore",
    "ContentStoreError",
    "HashMismatchError",
    "IntegrityError",
    "KeyCollisionError",
    "ObjectDescriptor",
    "ObjectNotFoundError",
    "ReadRangeError",
    "SizeMismatchError",
    "__version__",
]
