"""Mixins for SQLAlchemy models."""

from datetime import UTC, datetime, timedelta

from sqlalchemy import Column, DateTime, Uuid, func, inspect


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamp columns.

    ``updated_at`` is refreshed by the session guard in ``taskboard.access``
    on every flushed update, whatever value the caller assigned.
    """

    created_at = Column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    def touch(self) -> None:
        """Move updated_at to now, strictly past its previous value."""
        now = utcnow()
        history = inspect(self).attrs.updated_at.history
        if history.deleted:
            previous = history.deleted[0]
        elif history.added:
            # Caller-assigned value on an unloaded attribute; not a reference point.
            previous = None
        else:
            previous = history.unchanged[0] if history.unchanged else None
        if previous is not None:
            if previous.tzinfo is None:
                previous = previous.replace(tzinfo=UTC)
            if now <= previous:
                now = previous + timedelta(microseconds=1)
        self.updated_at = now


class OwnedMixin:
    """Marks a model as owner-scoped through its ``user_id`` column.

    Rows of owned models are only visible to, and writable by, the identity
    bound to the session (see ``taskboard.access``).
    """

    # Models redeclare this with their own foreign key or unique constraint.
    user_id = Column(Uuid, nullable=False)
