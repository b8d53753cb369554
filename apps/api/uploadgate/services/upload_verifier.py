from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath

from uploadgate.services.s3_storage import TEMP_LINK_TTL_SECONDS, ObjectStore

logger = logging.getLogger(__name__)

VIEWABLE_IMAGE_EXTENSIONS = {"jpeg", "jpg", "gif", "png"}


@dataclass(frozen=True)
class UploadVerified:
    temp_link: str
    thumbnail_url: str | None = None


@dataclass(frozen=True)
class UploadTooLarge:
    deleted: bool


def is_viewable_image(filename: str) -> bool:
    # Everything after the last dot of the base name, so ".png" counts as png.
    _, dot, extension = PurePosixPath(filename).name.rpartition(".")
    return bool(dot) and extension.lower() in VIEWABLE_IMAGE_EXTENSIONS


def should_include_thumbnail(*, filename: str, is_browser_preview_capable: bool) -> bool:
    # Browsers that can preview locally do not need a server-side thumbnail.
    return not is_browser_preview_capable and is_viewable_image(filename)


def verify_uploaded_object(
    *,
    store: ObjectStore,
    bucket: str,
    key: str,
    max_size: int | None,
    include_thumbnail: bool = False,
) -> UploadVerified | UploadTooLarge:
    """Re-check an uploaded object's size and hand out a temporary link.

    Oversized objects are deleted. Storage errors propagate unchanged.
    """
    if max_size is not None:
        size = store.head_size(bucket, key)
        if size > max_size:
            logger.warning(
                "Object s3://%s/%s is %d bytes, over the %d byte limit; deleting",
                bucket,
                key,
                size,
                max_size,
            )
            store.delete(bucket, key)
            return UploadTooLarge(deleted=True)

    link = store.presign(bucket, key, TEMP_LINK_TTL_SECONDS)
    return UploadVerified(temp_link=link, thumbnail_url=link if include_thumbnail else None)
