"""Exception taxonomy for the content store.

Every failure surfaced by a store operation is one of these types, so callers
can tell "the backend is down" apart from "the object is not there" apart
from "the bytes you gave us are wrong".
"""


class ContentStoreError(Exception):
    """Base class for all content store failures."""

    pass


class BackendUnavailableError(ContentStoreError):
    """Raised when a storage target cannot be reached, created or authorized.

    Transport failures, permission errors and unresolvable roots all land
    here. Never retried internally.
    """

    pass


class ObjectNotFoundError(ContentStoreError):
    """Raised when a key is absent from the backend.

    Attributes:
        key: Backend-relative key that was looked up
    """

    def __init__(self, key: str, message: str | None = None) -> None:
        self.key = key
        super().__init__(message or f"Object not found: {key}")


class ReadRangeError(ContentStoreError):
    """Raised when a read offset lies outside the stored object.

    An offset equal to the object size is valid and yields an empty stream.

    Attributes:
        offset: Requested starting byte
        size: Stored object size in bytes
    """

    def __init__(self, offset: int, size: int) -> None:
        self.offset = offset
        self.size = size
        super().__init__(f"Read offset {offset} is outside object of {size} bytes")


class IntegrityError(ContentStoreError):
    """Raised when content does not match its declared identity.

    Subclasses say which part of the identity failed. An IntegrityError
    during put guarantees nothing was made visible under the key.
    """

    pass


class SizeMismatchError(IntegrityError):
    """Raised when the bytes transferred differ from the declared size.

    Attributes:
        oid: Identifier the object was declared under
        expected: Declared size
        actual: Bytes seen. When the stream overran the declared size the
            copy stops early, so this is a lower bound.
    """

    def __init__(self, oid: str, expected: int, actual: int) -> None:
        self.oid = oid
        self.expected = expected
        self.actual = actual
        super().__init__(f"Content size does not match for {oid}: expected {expected} bytes, got {actual}")


class HashMismatchError(IntegrityError):
    """Raised when the computed digest differs from the declared identifier.

    Attributes:
        expected: Declared identifier
        actual: Digest of the bytes actually received
    """

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Content hash does not match OID: expected {expected}, got {actual}")


class KeyCollisionError(IntegrityError):
    """Raised when a key already holds content that cannot belong to the identifier.

    Keys are derived injectively from identifiers, so an existing object
    under the same key with a different size means either a broken hash,
    a broken key transform, or out-of-band tampering. The write is aborted
    and the existing object is left in place.

    Attributes:
        oid: Identifier being written
        key: Key both identities resolved to
        stored_size: Size of the object already present
    """

    def __init__(self, oid: str, key: str, stored_size: int) -> None:
        self.oid = oid
        self.key = key
        self.stored_size = stored_size
        super().__init__(f"Key collision suspected for {oid}: {key} already holds {stored_size} bytes of different content")
