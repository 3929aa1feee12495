"""Task API endpoints."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from taskboard.api.dependencies import get_task_service
from taskboard.enums import StatusFilter
from taskboard.schemas.task import (
    MAX_PAGE_SIZE,
    TaskCountsResponse,
    TaskCreate,
    TaskPageResponse,
    TaskQuery,
    TaskResponse,
    TaskUpdate,
)
from taskboard.services.task_service import TaskService

router = APIRouter(prefix="/api/v1/tasks", tags=["tasks"])


@router.get("", response_model=TaskPageResponse)
def list_tasks(
    tasks: Annotated[TaskService, Depends(get_task_service)],
    page: int = Query(default=1, ge=1),
    page_size: int | None = Query(default=None, ge=1, le=MAX_PAGE_SIZE),
    status_filter: StatusFilter = Query(default=StatusFilter.ALL, alias="status"),
    search: str = Query(default="", max_length=200),
):
    """Get a page of the current user's tasks, newest first."""
    query = TaskQuery(page=page, status=status_filter, search=search)
    if page_size is not None:
        query = TaskQuery(page=page, page_size=page_size, status=status_filter, search=search)

    result = tasks.list_tasks(query)
    return TaskPageResponse(
        items=[TaskResponse.model_validate(task) for task in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        page_count=result.page_count,
    )


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    tasks: Annotated[TaskService, Depends(get_task_service)],
):
    """Create a new task."""
    return tasks.create_task(task_data)


@router.get("/stats", response_model=TaskCountsResponse)
def get_task_stats(
    tasks: Annotated[TaskService, Depends(get_task_service)],
):
    """Get task counts per status."""
    return tasks.status_counts()


@router.get("/recent", response_model=list[TaskResponse])
def get_recent_tasks(
    tasks: Annotated[TaskService, Depends(get_task_service)],
    limit: int = Query(default=5, ge=1, le=50),
):
    """Get the most recently created tasks."""
    return tasks.recent_tasks(limit)


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: uuid.UUID,
    tasks: Annotated[TaskService, Depends(get_task_service)],
):
    """Get a specific task."""
    return tasks.get_task(task_id)


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: uuid.UUID,
    task_data: TaskUpdate,
    tasks: Annotated[TaskService, Depends(get_task_service)],
):
    """Update the supplied fields of a task."""
    return tasks.update_task(task_id, task_data)


@router.post("/{task_id}/toggle", response_model=TaskResponse)
def toggle_task(
    task_id: uuid.UUID,
    tasks: Annotated[TaskService, Depends(get_task_service)],
):
    """Flip a task between pending and completed."""
    return tasks.toggle_status(task_id)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: uuid.UUID,
    tasks: Annotated[TaskService, Depends(get_task_service)],
):
    """Delete a task."""
    tasks.delete_task(task_id)
