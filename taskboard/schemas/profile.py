"""Profile schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ProfileUpsert(BaseModel):
    """Create or replace the caller's profile."""

    name: str | None = Field(None, max_length=255)
    avatar_url: str | None = Field(None, max_length=2048)


class ProfileResponse(BaseModel):
    """Profile response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    name: str | None
    avatar_url: str | None
    created_at: datetime
    updated_at: datetime
    display_name: str | None = None


class AvatarUploadResponse(BaseModel):
    """Public URL of an uploaded avatar."""

    avatar_url: str
