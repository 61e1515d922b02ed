"""Object identity passed into the content store by its callers."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ObjectDescriptor:
    """The caller's claim about an object: its digest and its length.

    Owned by the metadata layer (LFS meta rows, attachment rows). The
    content store never creates one, it only checks content against it.

    Attributes:
        oid: Lowercase hex SHA-256 digest of the object's bytes
        size: Length of the object in bytes
    """

    oid: str
    size: int

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError(f"Object size must be non-negative, got {self.size}")
