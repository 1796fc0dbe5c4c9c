"""Task service: create, edit, status changes, drag-and-drop moves, deletion.

Checks run in a fixed order so callers get the most specific error:
missing task/board (NotFoundError), then the authorization policy
(ForbiddenError), then business rules such as the Done-lock (ValidationError).
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from taskboard.core.exceptions import NotFoundError, ValidationError
from taskboard.domain.entities import (
    TASK_DESCRIPTION_MAX_LENGTH, Board, Task, TaskPriority, TaskStatus, utcnow,
    validate_description, validate_due_date, validate_task_title,
)
from taskboard.domain.policy import policy
from taskboard.domain.positions import reorderer
from taskboard.domain.state_machine import state_machine
from taskboard.repositories.base import BoardRepository, TaskRepository, UserRepository

logger = logging.getLogger("taskboard")

UPDATABLE_FIELDS = ("title", "description", "priority", "due_date", "assigned_to", "tags")


class TaskService:
    """Task operations, authorized against the acting user."""

    def __init__(self, tasks: TaskRepository, boards: BoardRepository, users: UserRepository):
        self.tasks = tasks
        self.boards = boards
        self.users = users

    # ---- Lookups ----

    def _load_task(self, task_id: str) -> Task:
        task = self.tasks.get_by_id(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found", code="task.not_found")
        return task

    def _load_board(self, board_id: str) -> Board:
        board = self.boards.get_by_id(board_id)
        if board is None or not board.is_active:
            raise NotFoundError(f"Board {board_id} not found", code="board.not_found")
        return board

    def _check_assignee(self, board: Board, user_id: str) -> None:
        """An assignee must be an active member of the task's board."""
        if not board.is_member(user_id):
            raise ValidationError(
                f"User {user_id} is not a member of board '{board.name}'",
                code="task.assignee_not_member",
            )
        user = self.users.get_by_id(user_id)
        if user is None or not user.is_active:
            raise ValidationError(
                f"User {user_id} does not exist or is deactivated", code="task.assignee_inactive"
            )

    def get(self, task_id: str, acting_user_id: str) -> Task:
        task = self._load_task(task_id)
        policy.ensure_can_access_board(acting_user_id, self._load_board(task.board_id))
        return task

    def list_by_board(self, board_id: str, acting_user_id: str) -> List[Task]:
        board = self._load_board(board_id)
        policy.ensure_can_access_board(acting_user_id, board)
        return self.tasks.list_by_board(board.id)

    def list_assigned_to(self, user_id: str) -> List[Task]:
        active = {}
        result = []
        for task in self.tasks.list_by_assignee(user_id):
            if task.board_id not in active:
                board = self.boards.get_by_id(task.board_id)
                active[task.board_id] = board is not None and board.is_active
            if active[task.board_id]:
                result.append(task)
        return result

    def search(self, term: str, board_id: str, acting_user_id: str) -> List[Task]:
        board = self._load_board(board_id)
        policy.ensure_can_access_board(acting_user_id, board)
        term = (term or "").strip()
        if not term:
            return self.tasks.list_by_board(board.id)
        return self.tasks.search(term, board_id=board.id)

    def list_overdue(self, board_id: str, acting_user_id: str) -> List[Task]:
        board = self._load_board(board_id)
        policy.ensure_can_access_board(acting_user_id, board)
        return self.tasks.list_overdue(utcnow(), board_id=board.id)

    # ---- Persistence helpers ----

    def _persist(self, task: Task, changed: Iterable[Task]) -> Task:
        """Write ``task`` in full and the positions of the other touched tasks."""
        others = {t.id: t.position for t in changed if t.id != task.id}
        if others:
            self.tasks.update_positions(others)
        return self.tasks.update(task)

    # ---- Mutations ----

    def create(
        self,
        title: str,
        board_id: str,
        created_by: str,
        description: Optional[str] = None,
        priority=None,
        assigned_to: Optional[str] = None,
        due_date: Optional[datetime] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> Task:
        """Create a task at the end of the board's Todo column."""
        board = self._load_board(board_id)
        creator = self.users.get_by_id(created_by)
        if creator is None:
            raise NotFoundError(f"User {created_by} not found", code="user.not_found")
        policy.ensure_can_create_task(created_by, board)
        if not creator.is_active:
            raise ValidationError(f"User {created_by} is deactivated", code="user.inactive")

        task = Task(
            title=validate_task_title(title),
            board_id=board.id,
            created_by=created_by,
            description=validate_description(
                description, TASK_DESCRIPTION_MAX_LENGTH, "task.description_too_long"
            ),
            priority=TaskPriority.from_str(priority or TaskPriority.medium),
            due_date=validate_due_date(due_date),
            tags=list(tags or []),
        )
        if assigned_to:
            self._check_assignee(board, assigned_to)
            task.assigned_to = assigned_to

        changed = reorderer.append(self.tasks.list_by_status(board.id, TaskStatus.todo), task)
        if changed:
            self.tasks.update_positions({t.id: t.position for t in changed})
        task = self.tasks.create(task)
        logger.info("Task %s '%s' created on board %s by %s", task.id, task.title, board.id, created_by)
        return task

    def update(self, task_id: str, fields: Dict[str, Any], acting_user_id: str) -> Task:
        """Edit title/description/priority/due_date/assigned_to/tags.

        Status and position are changed through ``change_status``/``move``.
        """
        task = self._load_task(task_id)
        board = self._load_board(task.board_id)
        policy.ensure_can_edit_task(acting_user_id, task)
        state_machine.ensure_editable(task)

        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(
                f"Cannot update task field(s): {', '.join(sorted(unknown))}",
                code="task.field_not_updatable",
            )

        if "due_date" in fields:
            task.due_date = validate_due_date(fields["due_date"])
        if "assigned_to" in fields:
            if fields["assigned_to"]:
                self._check_assignee(board, fields["assigned_to"])
            task.assign(fields["assigned_to"] or None)
        task.edit(
            title=fields.get("title"),
            description=fields.get("description"),
            priority=fields.get("priority"),
            tags=fields.get("tags"),
        )

        task = self.tasks.update(task)
        logger.info("Task %s updated by %s: %s", task.id, acting_user_id, sorted(fields))
        return task

    def change_status(self, task_id: str, new_status, acting_user_id: str) -> Task:
        """Change status; the task lands at the end of the target column."""
        task = self._load_task(task_id)
        board = self._load_board(task.board_id)
        policy.ensure_can_change_task_status(acting_user_id, task)
        new_status = TaskStatus.from_str(new_status)
        if task.status is new_status:
            return task

        target = self.tasks.list_by_status(board.id, new_status)
        return self._move(task, board, new_status, len(target), acting_user_id)

    def move(self, task_id: str, target_status, target_index: int, acting_user_id: str) -> Task:
        """Drag-and-drop: place the task at ``target_index`` of ``target_status``'s column."""
        task = self._load_task(task_id)
        board = self._load_board(task.board_id)
        policy.ensure_can_change_task_status(acting_user_id, task)
        return self._move(task, board, TaskStatus.from_str(target_status), target_index, acting_user_id)

    def _move(self, task: Task, board: Board, target_status: TaskStatus,
              target_index: int, acting_user_id: str) -> Task:
        old_status = task.status
        source = self.tasks.list_by_status(board.id, old_status)
        target = source if target_status is old_status else self.tasks.list_by_status(board.id, target_status)

        changed = reorderer.move_across_columns(
            task, source, target, target_status, target_index, actor_id=acting_user_id,
        )
        task = self._persist(task, changed)
        logger.info(
            "Task %s moved %s -> %s[%d] by %s",
            task.id, old_status.value, task.status.value, task.position, acting_user_id,
        )
        return task

    def delete(self, task_id: str, acting_user_id: str) -> bool:
        """Delete a task (creator only, never while Done) and close the gap in its column."""
        task = self._load_task(task_id)
        policy.ensure_can_delete_task(acting_user_id, task)
        state_machine.ensure_deletable(task)

        bucket = self.tasks.list_by_status(task.board_id, task.status)
        deleted = self.tasks.delete(task.id)
        changed = reorderer.remove(bucket, task)
        if changed:
            self.tasks.update_positions({t.id: t.position for t in changed})
        logger.info("Task %s deleted by %s", task.id, acting_user_id)
        return deleted
