"""Enums shared by the models, the API schemas and the client."""

from enum import StrEnum


class TaskStatus(StrEnum):
    """Lifecycle status of a task."""

    PENDING = "pending"
    COMPLETED = "completed"

    def toggled(self) -> "TaskStatus":
        """Return the opposite status."""
        if self == TaskStatus.PENDING:
            return TaskStatus.COMPLETED
        return TaskStatus.PENDING


class StatusFilter(StrEnum):
    """Status filter accepted by task listings."""

    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"


class AuthEvent(StrEnum):
    """Session change events emitted by the identity provider."""

    SIGNED_IN = "signed_in"
    TOKEN_REFRESHED = "token_refreshed"
    SIGNED_OUT = "signed_out"
