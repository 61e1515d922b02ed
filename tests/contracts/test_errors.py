# tests/contracts/test_errors.py
"""Tests for the content store error taxonomy."""

import pytest

from contentstore.contracts import (
    BackendUnavailableError,
    ContentStoreError,
    HashMismatchError,
    IntegrityError,
    KeyCollisionError,
    ObjectNotFoundError,
    ReadRangeError,
    SizeMismatchError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "error_cls",
        [BackendUnavailableError, ObjectNotFoundError, ReadRangeError, IntegrityError],
    )
    def test_all_errors_derive_from_base(self, error_cls: type[Exception]) -> None:
        assert issubclass(error_cls, ContentStoreError)

    @pytest.mark.parametrize("error_cls", [SizeMismatchError, HashMismatchError, KeyCollisionError])
    def test_integrity_failures_share_a_base(self, error_cls: type[Exception]) -> None:
        assert issubclass(error_cls, IntegrityError)

    def test_not_found_is_not_an_integrity_error(self) -> None:
        assert not issubclass(ObjectNotFoundError, IntegrityError)
        assert not issubclass(BackendUnavailableError, IntegrityError)


class TestAttributes:
    def test_object_not_found(self) -> None:
        error = ObjectNotFoundError("ab/cd/ef")

        assert error.key == "ab/cd/ef"
        assert "ab/cd/ef" in str(error)

    def test_object_not_found_custom_message(self) -> None:
        assert str(ObjectNotFoundError("k", "gone")) == "gone"

    def test_read_range(self) -> None:
        error = ReadRangeError(11, 10)

        assert (error.offset, error.size) == (11, 10)
        assert "11" in str(error)

    def test_size_mismatch(self) -> None:
        error = SizeMismatchError("abc123", 10, 9)

        assert (error.oid, error.expected, error.actual) == ("abc123", 10, 9)
        assert "expected 10 bytes, got 9" in str(error)

    def test_hash_mismatch(self) -> None:
        error = HashMismatchError("aa", "bb")

        assert (error.expected, error.actual) == ("aa", "bb")
        assert "expected aa, got bb" in str(error)

    def test_key_collision(self) -> None:
        error = KeyCollisionError("abcdef", "ab/cd/ef", 3)

        assert (error.oid, error.key, error.stored_size) == ("abcdef", "ab/cd/ef", 3)
