"""User model."""

import uuid

from sqlalchemy import Column, String, Uuid

from taskboard.database import Base
from taskboard.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """Identity issued by the sign-up flow. Owns tasks and one profile."""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
