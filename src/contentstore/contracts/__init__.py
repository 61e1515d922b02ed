"""Shared contracts: object identity, backend protocols and the error taxonomy.

Kept free of implementation imports so every layer can depend on it.
"""

from contentstore.contracts.backend import Backend, BackendHandle, ObjectWriter
from contentstore.contracts.descriptor import ObjectDescriptor
from contentstore.contracts.errors import (
    BackendUnavailableError,
    ContentStoreError,
    HashMismatchError,
    IntegrityError,
    KeyCollisionError,
    ObjectNotFoundError,
    ReadRangeError,
    SizeMismatchError,
)

__all__ = [
    "Backend",
    "BackendHandle",
    "BackendUnavailableError",
    "ContentStoreError",
    "HashMismatchError",
    "IntegrityError",
    "KeyCollisionError",
    "ObjectDescriptor",
    "ObjectNotFoundError",
    "ObjectWriter",
    "ReadRangeError",
    "SizeMismatchError",
]
