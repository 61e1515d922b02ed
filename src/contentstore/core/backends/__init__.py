"""Storage backends: local directories, in-memory buckets and Azure Blob Storage.

The Azure backend is imported on demand by the factory so that importing
this package never touches the Azure SDK.
"""

from contentstore.core.backends.azure_auth import AzureAuthConfig
from contentstore.core.backends.factory import SUPPORTED_SCHEMES, open_backend
from contentstore.core.backends.local import LocalBackend
from contentstore.core.backends.memory import MemoryBackend, get_named_backend
from contentstore.core.backends.prefixed import PrefixedBackend

__all__ = [
    "SUPPORTED_SCHEMES",
    "AzureAuthConfig",
    "LocalBackend",
    "MemoryBackend",
    "PrefixedBackend",
    "get_named_backend",
    "open_backend",
]
