"""Profile model."""

import uuid

from sqlalchemy import Column, String, Uuid

from taskboard.database import Base
from taskboard.models.mixins import OwnedMixin, TimestampMixin


class Profile(Base, TimestampMixin, OwnedMixin):
    """Editable user details, at most one per user."""

    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, unique=True, index=True)
    name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
