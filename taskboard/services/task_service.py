"""Task querying and mutations for the signed-in user.

All reads and writes go through a session with an identity bound to it, so
owner scoping is applied by ``taskboard.access`` rather than here.
"""

import logging
import uuid

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from taskboard.access import require_identity
from taskboard.enums import StatusFilter, TaskStatus
from taskboard.errors import NotFoundError, ValidationError
from taskboard.models.task import Task
from taskboard.schemas.task import (
    TaskCountsResponse,
    TaskCreate,
    TaskPage,
    TaskQuery,
    TaskUpdate,
)

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the search text matches literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


class TaskService:
    """Service for the current user's tasks."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def list_tasks(self, query: TaskQuery) -> TaskPage:
        """Get one page of tasks matching the query, newest first."""
        q = self.db.query(Task)

        if query.status != StatusFilter.ALL:
            q = q.filter(Task.status == TaskStatus(query.status.value))

        if query.search:
            pattern = f"%{escape_like(query.search)}%"
            q = q.filter(
                or_(
                    Task.title.ilike(pattern, escape=LIKE_ESCAPE),
                    Task.description.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )

        total = q.count()
        items = (
            q.order_by(Task.created_at.desc(), Task.id.desc())
            .offset(query.offset)
            .limit(query.page_size)
            .all()
        )
        return TaskPage(items=items, total=total, page=query.page, page_size=query.page_size)

    def get_task(self, task_id: uuid.UUID) -> Task:
        """Get a task owned by the current user."""
        task = self.db.query(Task).filter(Task.id == task_id).first()
        if task is None:
            raise NotFoundError("Task not found")
        return task

    def create_task(self, data: TaskCreate) -> Task:
        """Create a task owned by the current user."""
        identity = require_identity(self.db)

        title = data.title.strip()
        if not title:
            raise ValidationError("Title is required")

        task = Task(
            user_id=identity,
            title=title,
            description=_blank_to_none(data.description),
            status=data.status,
        )
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        logger.info(f"Created task {task.id} for user {identity}")
        return task

    def update_task(self, task_id: uuid.UUID, data: TaskUpdate) -> Task:
        """Apply the fields present in ``data`` to a task."""
        changes = data.model_dump(exclude_unset=True)

        if "title" in changes:
            if changes["title"] is None or not changes["title"].strip():
                raise ValidationError("Title is required")
            changes["title"] = changes["title"].strip()
        if "status" in changes and changes["status"] is None:
            raise ValidationError("Status cannot be null")
        if "description" in changes:
            changes["description"] = _blank_to_none(changes["description"])

        task = self.get_task(task_id)
        for name, value in changes.items():
            setattr(task, name, value)

        self.db.commit()
        self.db.refresh(task)
        logger.info(f"Updated task {task.id}: {sorted(changes)}")
        return task

    def toggle_status(self, task_id: uuid.UUID) -> Task:
        """Flip a task between pending and completed."""
        task = self.get_task(task_id)
        return self.update_task(task_id, TaskUpdate(status=TaskStatus(task.status).toggled()))

    def delete_task(self, task_id: uuid.UUID) -> None:
        """Delete a task."""
        task = self.get_task(task_id)
        self.db.delete(task)
        self.db.commit()
        logger.info(f"Deleted task {task_id}")

    def status_counts(self) -> TaskCountsResponse:
        """Count tasks per status with a single grouped query."""
        rows = self.db.query(Task.status, func.count(Task.id)).group_by(Task.status).all()
        counts = {TaskStatus(status).value: count for status, count in rows}
        return TaskCountsResponse(
            total=sum(counts.values()),
            pending=counts.get(TaskStatus.PENDING.value, 0),
            completed=counts.get(TaskStatus.COMPLETED.value, 0),
        )

    def recent_tasks(self, limit: int = 5) -> list[Task]:
        """Get the most recently created tasks."""
        return (
            self.db.query(Task)
            .order_by(Task.created_at.desc(), Task.id.desc())
            .limit(limit)
            .all()
        )


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value
