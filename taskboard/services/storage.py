"""Avatar storage.

Objects are written below ``settings.storage_dir`` and served by the static
``/storage`` mount, so the returned URL can be stored directly as a profile's
``avatar_url``.
"""

import logging
import secrets
import uuid
from datetime import UTC, datetime
from pathlib import Path

from taskboard.config import get_settings
from taskboard.errors import (
    FileTooLargeError,
    InvalidContentTypeError,
    TransientError,
    ValidationError,
)

logger = logging.getLogger(__name__)

AVATAR_PREFIX = "avatars"
STORAGE_MOUNT = "/storage"

# Raster formats only; uploads are served back from the API origin.
ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def validate_avatar(content: bytes, content_type: str | None, max_bytes: int) -> None:
    """Reject unsupported or oversized uploads before anything is stored."""
    if _media_type(content_type) not in ALLOWED_IMAGE_TYPES:
        raise InvalidContentTypeError(f"File must be an image, got {content_type or 'unknown'}")
    if len(content) > max_bytes:
        raise FileTooLargeError(
            f"File too large. Maximum size is {max_bytes // (1024 * 1024)} MiB."
        )
    if not content:
        raise ValidationError("File is empty")


def avatar_key(user_id: uuid.UUID, content_type: str, now: datetime | None = None) -> str:
    """Object key under the user's prefix; unique per upload."""
    now = now or datetime.now(UTC)
    stamp = int(now.timestamp() * 1000)
    extension = _extension_for(content_type)
    return f"{AVATAR_PREFIX}/{user_id}/{stamp}-{secrets.token_hex(4)}{extension}"


def _media_type(content_type: str | None) -> str:
    return (content_type or "").split(";")[0].strip().lower()


def _extension_for(content_type: str) -> str:
    return ALLOWED_IMAGE_TYPES.get(_media_type(content_type), "")


class AvatarStorage:
    """Filesystem-backed object storage for avatar images."""

    def __init__(
        self,
        root: str | Path | None = None,
        public_base_url: str | None = None,
        max_bytes: int | None = None,
    ) -> None:
        settings = get_settings()
        self.root = Path(root or settings.storage_dir)
        self.public_base_url = (public_base_url or settings.public_base_url).rstrip("/")
        self.max_bytes = max_bytes if max_bytes is not None else settings.avatar_max_bytes

    def public_url(self, key: str) -> str:
        """Public URL for a stored object."""
        return f"{self.public_base_url}{STORAGE_MOUNT}/{key}"

    def upload_avatar(self, user_id: uuid.UUID, content: bytes, content_type: str | None) -> str:
        """Store an avatar image and return its public URL.

        Does not update the profile; callers save the URL separately.
        """
        validate_avatar(content, content_type, self.max_bytes)

        key = avatar_key(user_id, content_type)
        path = self.root / key
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # "xb" refuses to overwrite an existing object.
            with open(path, "xb") as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Failed to store avatar for user {user_id}: {e}")
            raise TransientError("Could not store file") from e

        logger.info(f"Stored avatar {key} ({len(content)} bytes)")
        return self.public_url(key)
