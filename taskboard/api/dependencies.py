"""FastAPI dependencies for authentication and database."""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from taskboard.access import bind_identity, unbind_identity
from taskboard.database import get_db
from taskboard.errors import AuthenticationError
from taskboard.models.user import User
from taskboard.services.auth import decode_access_token, get_user, user_id_from_payload
from taskboard.services.profile_service import ProfileService
from taskboard.services.storage import AvatarStorage
from taskboard.services.task_service import TaskService

security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    if credentials is None:
        raise AuthenticationError()

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise AuthenticationError("Invalid authentication credentials")

    user_id = user_id_from_payload(payload)
    if user_id is None:
        raise AuthenticationError("Invalid authentication credentials")

    user = get_user(db, user_id)
    if user is None:
        raise AuthenticationError("User not found")

    return user


def get_scoped_db(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> Generator[Session, None, None]:
    """Database session scoped to the current user's rows."""
    bind_identity(db, current_user.id)
    try:
        yield db
    except Exception:
        # A rejected flush leaves the transaction unusable
        db.rollback()
        raise
    finally:
        unbind_identity(db)


def get_task_service(
    db: Annotated[Session, Depends(get_scoped_db)],
) -> TaskService:
    """Get task service bound to the current user."""
    return TaskService(db)


def get_profile_service(
    db: Annotated[Session, Depends(get_scoped_db)],
) -> ProfileService:
    """Get profile service bound to the current user."""
    return ProfileService(db)


def get_avatar_storage() -> AvatarStorage:
    """Get avatar storage instance."""
    return AvatarStorage()
