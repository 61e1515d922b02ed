"""Process-wide store wiring.

Storage is built once at startup from ContentStoreSettings and is read-only
afterwards. Each store gets its backend resolved exactly once, instead of
choosing between local disk and the bucket on every call.
"""

from dataclasses import dataclass
from pathlib import Path

from contentstore.core.backends.factory import open_backend
from contentstore.core.bucket import ObjectBucket
from contentstore.core.config import ContentStoreSettings
from contentstore.core.content_store import ContentStore
from contentstore.core.logging import get_logger

__all__ = ["Storage"]

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Storage:
    """All stores of one deployment.

    Attributes:
        lfs: Verified content-addressed store for LFS objects
        attachments: Keyed bucket for issue/release attachments
        avatars: Keyed bucket for user avatars
        repository_avatars: Keyed bucket for repository avatars
    """

    lfs: ContentStore
    attachments: ObjectBucket
    avatars: ObjectBucket
    repository_avatars: ObjectBucket

    @classmethod
    def from_settings(cls, settings: ContentStoreSettings) -> "Storage":
        storage = settings.storage

        def bucket(path: Path) -> ObjectBucket:
            return ObjectBucket(open_backend(path, storage.bucket_url, storage.azure), chunk_size=settings.chunk_size)

        result = cls(
            lfs=ContentStore(
                open_backend(settings.lfs_content_path, storage.bucket_url, storage.azure),
                chunk_size=settings.chunk_size,
                verify_content_hash=settings.verify_content_hash,
                exists_fail_open=settings.exists_fail_open,
            ),
            attachments=bucket(settings.attachment_path),
            avatars=bucket(settings.avatar_upload_path),
            repository_avatars=bucket(settings.repository_avatar_upload_path),
        )
        logger.debug(
            "Configured stores",
            lfs=result.lfs.backend.describe(),
            attachments=result.attachments.backend.describe(),
            avatars=result.avatars.backend.describe(),
            repository_avatars=result.repository_avatars.backend.describe(),
        )
        return result
