"""Tests for avatar storage."""

import uuid
from datetime import UTC, datetime
from unittest.mock import patch

import pytest

from taskboard.errors import (
    FileTooLargeError,
    InvalidContentTypeError,
    TransientError,
    ValidationError,
)
from taskboard.services.storage import AvatarStorage, avatar_key, validate_avatar

MIB = 1024 * 1024


class TestValidateAvatar:
    """Tests for validate_avatar."""

    def test_accepts_image_within_limit(self):
        validate_avatar(b"\x00" * MIB, "image/png", 5 * MIB)

    def test_accepts_exact_limit(self):
        validate_avatar(b"\x00" * (5 * MIB), "image/jpeg", 5 * MIB)

    def test_rejects_non_image(self):
        with pytest.raises(InvalidContentTypeError):
            validate_avatar(b"data", "application/pdf", 5 * MIB)

    def test_rejects_missing_content_type(self):
        with pytest.raises(InvalidContentTypeError):
            validate_avatar(b"data", None, 5 * MIB)

    def test_rejects_svg(self):
        with pytest.raises(InvalidContentTypeError):
            validate_avatar(b"<svg onload='alert(1)'/>", "image/svg+xml", 5 * MIB)

    def test_rejects_image_type_outside_allow_list(self):
        with pytest.raises(InvalidContentTypeError):
            validate_avatar(b"BM\x00\x00", "image/bmp", 5 * MIB)

    def test_accepts_media_type_with_parameters(self):
        validate_avatar(b"\x89PNG", "Image/PNG; charset=binary", 5 * MIB)

    def test_rejects_oversized(self):
        with pytest.raises(FileTooLargeError):
            validate_avatar(b"\x00" * (10 * MIB), "image/png", 5 * MIB)

    def test_type_checked_before_size(self):
        with pytest.raises(InvalidContentTypeError):
            validate_avatar(b"\x00" * (10 * MIB), "text/plain", 5 * MIB)

    def test_rejects_empty(self):
        with pytest.raises(ValidationError):
            validate_avatar(b"", "image/png", 5 * MIB)

    def test_errors_are_validation_errors(self):
        assert issubclass(InvalidContentTypeError, ValidationError)
        assert issubclass(FileTooLargeError, ValidationError)


class TestAvatarKey:
    """Tests for avatar_key."""

    def test_key_under_user_prefix(self):
        user_id = uuid.uuid4()
        now = datetime(2026, 1, 3, 12, 0, tzinfo=UTC)
        key = avatar_key(user_id, "image/png", now)

        prefix, owner, name = key.split("/")
        assert prefix == "avatars"
        assert owner == str(user_id)
        assert name.startswith(f"{int(now.timestamp() * 1000)}-")
        assert name.endswith(".png")

    def test_same_instant_keys_differ(self):
        user_id = uuid.uuid4()
        now = datetime.now(UTC)
        assert avatar_key(user_id, "image/png", now) != avatar_key(user_id, "image/png", now)

    def test_extension_ignores_parameters(self):
        key = avatar_key(uuid.uuid4(), "image/jpeg; charset=binary")
        assert key.endswith(".jpg")


class TestAvatarStorage:
    """Tests for AvatarStorage."""

    def test_upload_writes_file_and_returns_url(self, tmp_path):
        storage = AvatarStorage(root=tmp_path, public_base_url="https://cdn.example.com/")
        user_id = uuid.uuid4()

        url = storage.upload_avatar(user_id, b"\x89PNG", "image/png")

        assert url.startswith(f"https://cdn.example.com/storage/avatars/{user_id}/")
        key = url.removeprefix("https://cdn.example.com/storage/")
        assert (tmp_path / key).read_bytes() == b"\x89PNG"

    def test_invalid_upload_writes_nothing(self, tmp_path):
        storage = AvatarStorage(root=tmp_path, max_bytes=10)

        with pytest.raises(FileTooLargeError):
            storage.upload_avatar(uuid.uuid4(), b"\x00" * 11, "image/png")
        with pytest.raises(InvalidContentTypeError):
            storage.upload_avatar(uuid.uuid4(), b"\x00", "text/html")

        assert list(tmp_path.iterdir()) == []

    def test_filesystem_failure_is_transient(self, tmp_path):
        storage = AvatarStorage(root=tmp_path)

        failing_open = patch(
            "taskboard.services.storage.open", side_effect=OSError("disk full"), create=True
        )
        with failing_open, pytest.raises(TransientError):
            storage.upload_avatar(uuid.uuid4(), b"\x89PNG", "image/png")
