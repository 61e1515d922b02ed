# tests/conftest.py
"""Shared test fixtures and helpers.

Store fixtures are parametrized over the local and in-memory backends so
every ContentStore/ObjectBucket behaviour is checked against both a durable
and a non-durable implementation of the Backend protocol.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import hashlib
import logging
import os
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog
from hypothesis import Verbosity, settings

from contentstore.contracts import Backend, ObjectDescriptor
from contentstore.core.backends.local import LocalBackend
from contentstore.core.backends.memory import MemoryBackend
from contentstore.core.bucket import ObjectBucket
from contentstore.core.content_store import ContentStore

settings.register_profile("ci", max_examples=100, deadline=None)
settings.register_profile("nightly", max_examples=1000, deadline=None)
settings.register_profile("debug", max_examples=10, verbosity=Verbosity.verbose, deadline=None)
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "ci"))

# SHA-256 of the empty string
EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def descriptor_for(content: bytes) -> ObjectDescriptor:
    """Build the correct descriptor for content."""
    return ObjectDescriptor(oid=hashlib.sha256(content).hexdigest(), size=len(content))


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Keep structlog and root handler configuration from leaking between tests."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture(params=["local", "memory"])
def backend(request: pytest.FixtureRequest, tmp_path: Path) -> Backend:
    """A fresh, empty backend of each kind."""
    if request.param == "local":
        return LocalBackend(tmp_path / "objects")
    return MemoryBackend("test")


@pytest.fixture
def store(backend: Backend) -> ContentStore:
    """ContentStore with a small chunk size so multi-chunk paths are exercised."""
    return ContentStore(backend, chunk_size=7)


@pytest.fixture
def bucket(backend: Backend) -> ObjectBucket:
    return ObjectBucket(backend, chunk_size=7)
