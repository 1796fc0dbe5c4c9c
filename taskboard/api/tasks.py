"""Tasks API router: CRUD, status changes, drag-and-drop moves."""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from taskboard.api.deps import get_task_service
from taskboard.schemas.schemas import (
    MessageResponse, TaskCreate, TaskMove, TaskOut, TaskStatusChange, TaskUpdate,
)
from taskboard.services.task_service import TaskService
from taskboard.core.security import get_current_user_id

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("/", response_model=TaskOut, status_code=201)
async def create_task(
    body: TaskCreate,
    tasks: TaskService = Depends(get_task_service),
    user_id: str = Depends(get_current_user_id),
):
    """Create a task at the end of the Todo column."""
    task = tasks.create(
        body.title, body.board_id, user_id,
        description=body.description,
        priority=body.priority,
        assigned_to=body.assigned_to,
        due_date=body.due_date,
        tags=body.tags,
    )
    return TaskOut.model_validate(task)


@router.get("/", response_model=list[TaskOut])
async def list_tasks(
    board_id: str = Query(...),
    search: Optional[str] = Query(None),
    tasks: TaskService = Depends(get_task_service),
    user_id: str = Depends(get_current_user_id),
):
    """List a board's tasks, ordered by column then position."""
    if search:
        found = tasks.search(search, board_id, user_id)
    else:
        found = tasks.list_by_board(board_id, user_id)
    return [TaskOut.model_validate(t) for t in found]


@router.get("/assigned/me", response_model=list[TaskOut])
async def my_tasks(
    tasks: TaskService = Depends(get_task_service),
    user_id: str = Depends(get_current_user_id),
):
    """Tasks assigned to the current user."""
    return [TaskOut.model_validate(t) for t in tasks.list_assigned_to(user_id)]


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(
    task_id: str,
    tasks: TaskService = Depends(get_task_service),
    user_id: str = Depends(get_current_user_id),
):
    """Get a single task."""
    return TaskOut.model_validate(tasks.get(task_id, user_id))


@router.put("/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: str,
    body: TaskUpdate,
    tasks: TaskService = Depends(get_task_service),
    user_id: str = Depends(get_current_user_id),
):
    """Edit a task (creator or assignee, not while Done)."""
    fields = body.model_dump(exclude_unset=True)
    return TaskOut.model_validate(tasks.update(task_id, fields, user_id))


@router.patch("/{task_id}/status", response_model=TaskOut)
async def change_status(
    task_id: str,
    body: TaskStatusChange,
    tasks: TaskService = Depends(get_task_service),
    user_id: str = Depends(get_current_user_id),
):
    """Change a task's column."""
    return TaskOut.model_validate(tasks.change_status(task_id, body.status, user_id))


@router.post("/{task_id}/move", response_model=TaskOut)
async def move_task(
    task_id: str,
    body: TaskMove,
    tasks: TaskService = Depends(get_task_service),
    user_id: str = Depends(get_current_user_id),
):
    """Drag-and-drop a task to a column and index."""
    return TaskOut.model_validate(tasks.move(task_id, body.status, body.index, user_id))


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: str,
    tasks: TaskService = Depends(get_task_service),
    user_id: str = Depends(get_current_user_id),
):
    """Delete a task (creator only, not while Done)."""
    tasks.delete(task_id, user_id)
    return MessageResponse(message="Task deleted", detail={"id": task_id})
