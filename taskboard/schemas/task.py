"""Task schemas and listing descriptors."""

import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from taskboard.config import get_settings
from taskboard.enums import StatusFilter, TaskStatus
from taskboard.errors import ValidationError

MAX_PAGE_SIZE = 100


class TaskCreate(BaseModel):
    """Create a new task."""

    title: str = Field(..., max_length=500)
    description: str | None = Field(None, max_length=5000)
    status: TaskStatus = TaskStatus.PENDING


class TaskUpdate(BaseModel):
    """Partial task update. Only fields present in the request are applied."""

    title: str | None = Field(None, max_length=500)
    description: str | None = Field(None, max_length=5000)
    status: TaskStatus | None = None


class TaskResponse(BaseModel):
    """Task response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: str | None
    status: TaskStatus
    created_at: datetime
    updated_at: datetime


class TaskPageResponse(BaseModel):
    """One page of a task listing."""

    items: list[TaskResponse]
    total: int
    page: int
    page_size: int
    page_count: int


class TaskCountsResponse(BaseModel):
    """Task totals per status."""

    total: int = 0
    pending: int = 0
    completed: int = 0


@dataclass(frozen=True)
class TaskQuery:
    """Immutable description of one page of a filtered task listing.

    Instances are hashable and compare by value, so they double as request
    keys when deciding whether a listing result is still current.
    """

    page: int = 1
    page_size: int = field(default_factory=lambda: get_settings().task_page_size)
    status: StatusFilter = StatusFilter.ALL
    search: str = ""

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValidationError("Page must be 1 or greater")
        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise ValidationError(f"Page size must be between 1 and {MAX_PAGE_SIZE}")
        try:
            status = StatusFilter(self.status)
        except ValueError as e:
            raise ValidationError(f"Unknown status filter: {self.status}") from e
        object.__setattr__(self, "status", status)
        object.__setattr__(self, "search", (self.search or "").strip())

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def with_page(self, page: int) -> "TaskQuery":
        """Same filters, different page."""
        return TaskQuery(
            page=page, page_size=self.page_size, status=self.status, search=self.search
        )

    def to_params(self) -> dict[str, Any]:
        """Query-string parameters for the listing endpoint."""
        params: dict[str, Any] = {
            "page": self.page,
            "page_size": self.page_size,
            "status": self.status.value,
        }
        if self.search:
            params["search"] = self.search
        return params


@dataclass
class TaskPage:
    """A page of tasks plus the pre-pagination total."""

    items: list[Any]
    total: int
    page: int
    page_size: int

    @property
    def page_count(self) -> int:
        """Number of pages; never less than 1."""
        return max(1, math.ceil(self.total / self.page_size))