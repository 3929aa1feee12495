"""Task model."""

import uuid

from sqlalchemy import CheckConstraint, Column, Enum, ForeignKey, Index, String, Text, Uuid

from taskboard.database import Base
from taskboard.enums import TaskStatus
from taskboard.models.mixins import OwnedMixin, TimestampMixin


class Task(Base, TimestampMixin, OwnedMixin):
    """A personal task, visible only to its owner."""

    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'completed')", name="ck_tasks_status"),
        Index("ix_tasks_user_id_created_at", "user_id", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        Enum(
            TaskStatus,
            name="task_status",
            native_enum=False,
            create_constraint=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=TaskStatus.PENDING,
        server_default=TaskStatus.PENDING.value,
    )
