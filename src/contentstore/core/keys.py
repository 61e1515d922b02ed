"""Key derivation for stored objects.

Content objects are sharded two levels deep by their digest so no single
directory (or listing prefix) accumulates millions of entries:

    e3b0c44298fc... -> e3/b0/c44298fc...

The layout is shared with existing stores on disk and in buckets, so it
must stay bit-exact. Keys always use "/" regardless of platform.
"""

import re

__all__ = ["attachment_key", "is_valid_oid", "transform_key"]

# Identifiers are hex digests. Anything else could escape the store root
# once joined onto a filesystem path.
_OID_PATTERN = re.compile(r"[0-9a-f]+")


def transform_key(oid: str) -> str:
    """Map an object identifier to its sharded storage key.

    Identifiers shorter than five characters are returned unchanged.

    Args:
        oid: Hex object identifier

    Returns:
        Backend-relative key of the form ab/cd/ef0123...
    """
    if len(oid) < 5:
        return oid
    return f"{oid[0:2]}/{oid[2:4]}/{oid[4:]}"


def attachment_key(uuid: str) -> str:
    """Map an attachment UUID to its storage key (a/b/ab...).

    Raises:
        ValueError: If uuid has fewer than two characters
    """
    if len(uuid) < 2:
        raise ValueError(f"Attachment UUID too short to shard: {uuid!r}")
    return f"{uuid[0]}/{uuid[1]}/{uuid}"


def is_valid_oid(oid: str) -> bool:
    """Return True if oid is a non-empty lowercase hex string."""
    return _OID_PATTERN.fullmatch(oid) is not None
