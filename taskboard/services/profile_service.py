"""Profile lookup and upsert for the signed-in user."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskboard.access import require_identity
from taskboard.models.profile import Profile
from taskboard.models.user import User
from taskboard.schemas.profile import ProfileUpsert

logger = logging.getLogger(__name__)


class ProfileService:
    """Service for the current user's single profile row."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_profile(self) -> Profile | None:
        """Get the current user's profile, if one has been saved."""
        require_identity(self.db)
        return self.db.query(Profile).first()

    def upsert_profile(self, data: ProfileUpsert) -> Profile:
        """Create the profile or replace its name and avatar.

        ``user_id`` is the conflict target: there is never more than one row
        per user.
        """
        identity = require_identity(self.db)
        name = _blank_to_none(data.name)
        avatar_url = _blank_to_none(data.avatar_url)

        profile = self.get_profile()
        if profile is None:
            profile = Profile(user_id=identity, name=name, avatar_url=avatar_url)
            self.db.add(profile)
            try:
                self.db.commit()
            except IntegrityError:
                # Another request created the row first; update that one instead.
                self.db.rollback()
                profile = self.get_profile()
                if profile is None:
                    raise
                self._apply(profile, name, avatar_url)
        else:
            self._apply(profile, name, avatar_url)

        self.db.refresh(profile)
        logger.info(f"Saved profile for user {identity}")
        return profile

    def _apply(self, profile: Profile, name: str | None, avatar_url: str | None) -> None:
        profile.name = name
        profile.avatar_url = avatar_url
        self.db.commit()


def display_name(profile: Profile | None, user: User) -> str:
    """Profile name, falling back to the local part of the user's email."""
    if profile is not None and profile.name:
        return profile.name
    return user.email.split("@")[0]


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()
