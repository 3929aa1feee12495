"""Profile API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile

from taskboard.api.dependencies import get_avatar_storage, get_current_user, get_profile_service
from taskboard.models.user import User
from taskboard.schemas.profile import AvatarUploadResponse, ProfileResponse, ProfileUpsert
from taskboard.services.profile_service import ProfileService, display_name
from taskboard.services.storage import AvatarStorage

router = APIRouter(prefix="/api/v1/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse | None)
def get_profile(
    current_user: Annotated[User, Depends(get_current_user)],
    profiles: Annotated[ProfileService, Depends(get_profile_service)],
):
    """Get the current user's profile, or null if none has been saved."""
    profile = profiles.get_profile()
    if profile is None:
        return None
    response = ProfileResponse.model_validate(profile)
    response.display_name = display_name(profile, current_user)
    return response


@router.put("", response_model=ProfileResponse)
def upsert_profile(
    profile_data: ProfileUpsert,
    current_user: Annotated[User, Depends(get_current_user)],
    profiles: Annotated[ProfileService, Depends(get_profile_service)],
):
    """Create or replace the current user's profile."""
    profile = profiles.upsert_profile(profile_data)
    response = ProfileResponse.model_validate(profile)
    response.display_name = display_name(profile, current_user)
    return response


@router.post("/avatar", response_model=AvatarUploadResponse)
async def upload_avatar(
    file: Annotated[UploadFile, File(description="Avatar image")],
    current_user: Annotated[User, Depends(get_current_user)],
    storage: Annotated[AvatarStorage, Depends(get_avatar_storage)],
):
    """Upload an avatar image and return its public URL.

    The profile is not changed; save the URL with ``PUT /api/v1/profile``.
    """
    content = await file.read()
    url = storage.upload_avatar(current_user.id, content, file.content_type)
    return AvatarUploadResponse(avatar_url=url)
