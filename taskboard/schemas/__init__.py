"""Pydantic schemas for API requests and responses."""

from taskboard.schemas.auth import AuthResponse, UserLogin, UserRegister, UserResponse
from taskboard.schemas.profile import AvatarUploadResponse, ProfileResponse, ProfileUpsert
from taskboard.schemas.task import (
    TaskCountsResponse,
    TaskCreate,
    TaskPage,
    TaskPageResponse,
    TaskQuery,
    TaskResponse,
    TaskUpdate,
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "AuthResponse",
    "UserResponse",
    "TaskCreate",
    "TaskUpdate",
    "TaskResponse",
    "TaskPageResponse",
    "TaskCountsResponse",
    "TaskQuery",
    "TaskPage",
    "ProfileUpsert",
    "ProfileResponse",
    "AvatarUploadResponse",
]
