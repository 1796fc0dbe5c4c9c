"""Authorization policy derived from board ownership, membership and task creatorship."""

import logging
from typing import Optional

from taskboard.core.exceptions import ForbiddenError
from taskboard.domain.entities import Board, Task

logger = logging.getLogger("taskboard")


class AuthorizationPolicy:
    """Pure allow/deny decisions. ``ensure_*`` turn a denial into ForbiddenError."""

    @staticmethod
    def can_access_board(user_id: Optional[str], board: Board) -> bool:
        return bool(user_id) and (user_id == board.owner_id or user_id in board.members)

    @staticmethod
    def can_modify_board(user_id: Optional[str], board: Board) -> bool:
        """Rename, deactivate, membership changes and ownership transfer."""
        return bool(user_id) and user_id == board.owner_id

    @staticmethod
    def can_create_task(user_id: Optional[str], board: Board) -> bool:
        return AuthorizationPolicy.can_access_board(user_id, board)

    @staticmethod
    def can_edit_task(user_id: Optional[str], task: Task) -> bool:
        return bool(user_id) and user_id in (task.created_by, task.assigned_to)

    @staticmethod
    def can_change_task_status(user_id: Optional[str], task: Task) -> bool:
        return AuthorizationPolicy.can_edit_task(user_id, task)

    @staticmethod
    def can_delete_task(user_id: Optional[str], task: Task) -> bool:
        return bool(user_id) and user_id == task.created_by

    # ---- Enforcement ----

    @staticmethod
    def _deny(user_id, message: str, code: str):
        logger.warning("Denied %s for user %s: %s", code, user_id, message)
        raise ForbiddenError(message, code=code)

    def ensure_can_access_board(self, user_id: str, board: Board) -> None:
        if not self.can_access_board(user_id, board):
            self._deny(user_id, "You do not have access to this board", "board.access_denied")

    def ensure_can_modify_board(self, user_id: str, board: Board) -> None:
        if not self.can_modify_board(user_id, board):
            self._deny(user_id, "Only the board owner can modify this board", "board.owner_only")

    def ensure_can_create_task(self, user_id: str, board: Board) -> None:
        if not self.can_create_task(user_id, board):
            self._deny(user_id, "Only board members can create tasks", "task.create_denied")

    def ensure_can_edit_task(self, user_id: str, task: Task) -> None:
        if not self.can_edit_task(user_id, task):
            self._deny(user_id, "Only the creator or assignee can edit this task", "task.edit_denied")

    def ensure_can_change_task_status(self, user_id: str, task: Task) -> None:
        if not self.can_change_task_status(user_id, task):
            self._deny(
                user_id,
                "Only the creator or assignee can change this task's status",
                "task.status_denied",
            )

    def ensure_can_delete_task(self, user_id: str, task: Task) -> None:
        if not self.can_delete_task(user_id, task):
            self._deny(user_id, "Only the creator can delete this task", "task.delete_denied")


policy = AuthorizationPolicy()
