"""SQLAlchemy models."""

from taskboard.models.profile import Profile
from taskboard.models.task import Task
from taskboard.models.user import User

__all__ = [
    "User",
    "Task",
    "Profile",
]
