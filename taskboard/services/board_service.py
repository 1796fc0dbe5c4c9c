"""Board service: create, update, membership, deactivation, statistics."""

import logging
from typing import Any, Dict, List, Optional

from taskboard.core.config import settings
from taskboard.core.exceptions import ConflictError, NotFoundError, ValidationError
from taskboard.domain.entities import (
    BOARD_DESCRIPTION_MAX_LENGTH, Board, utcnow, validate_board_name, validate_color,
    validate_description,
)
from taskboard.domain.policy import policy
from taskboard.repositories.base import BoardRepository, TaskRepository, UserRepository

logger = logging.getLogger("taskboard")

UPDATABLE_FIELDS = ("name", "description", "color")


class BoardService:
    """Board operations, authorized against the acting user."""

    def __init__(self, boards: BoardRepository, tasks: TaskRepository, users: UserRepository):
        self.boards = boards
        self.tasks = tasks
        self.users = users

    # ---- Lookups ----

    def _load(self, board_id: str) -> Board:
        """Fetch an active board. Deactivated boards are treated as missing."""
        board = self.boards.get_by_id(board_id)
        if board is None or not board.is_active:
            raise NotFoundError(f"Board {board_id} not found", code="board.not_found")
        return board

    def _active_user(self, user_id: str):
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found", code="user.not_found")
        if not user.is_active:
            raise ValidationError(f"User {user_id} is deactivated", code="user.inactive")
        return user

    def _check_name_free(self, name: str, owner_id: str, exclude_id: Optional[str] = None) -> None:
        if settings.BOARD_NAME_UNIQUE_PER_OWNER and self.boards.name_exists(name, owner_id, exclude_id):
            raise ConflictError(f"You already have a board named '{name}'", code="board.name_taken")

    def get(self, board_id: str, acting_user_id: str) -> Board:
        board = self._load(board_id)
        policy.ensure_can_access_board(acting_user_id, board)
        return board

    def list_accessible(self, user_id: str) -> List[Board]:
        return self.boards.list_accessible(user_id)

    def search(self, term: str, user_id: str) -> List[Board]:
        term = (term or "").strip()
        if not term:
            return self.list_accessible(user_id)
        return self.boards.search(term, user_id)

    # ---- Mutations ----

    def create(self, name: str, owner_id: str, description: Optional[str] = None,
               color: Optional[str] = None) -> Board:
        """Create a board; the creator becomes owner and sole member."""
        self._active_user(owner_id)
        name = validate_board_name(name)
        self._check_name_free(name, owner_id)

        board = Board(
            name=name,
            owner_id=owner_id,
            description=validate_description(
                description, BOARD_DESCRIPTION_MAX_LENGTH, "board.description_too_long"
            ),
            color=validate_color(color or settings.DEFAULT_BOARD_COLOR),
        )
        board = self.boards.create(board)
        logger.info("Board %s '%s' created by %s", board.id, board.name, owner_id)
        return board

    def update(self, board_id: str, fields: Dict[str, Any], acting_user_id: str) -> Board:
        """Update name/description/color. Unknown fields are rejected."""
        board = self._load(board_id)
        policy.ensure_can_modify_board(acting_user_id, board)

        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(
                f"Cannot update board field(s): {', '.join(sorted(unknown))}",
                code="board.field_not_updatable",
            )
        if fields.get("name") is not None:
            self._check_name_free(validate_board_name(fields["name"]), board.owner_id, board.id)

        board.update(**{k: fields.get(k) for k in UPDATABLE_FIELDS})
        board = self.boards.update(board)
        logger.info("Board %s updated by %s: %s", board.id, acting_user_id, sorted(fields))
        return board

    def add_member(self, board_id: str, user_id: str, acting_user_id: str) -> Board:
        board = self._load(board_id)
        policy.ensure_can_modify_board(acting_user_id, board)
        self._active_user(user_id)

        if not board.add_member(user_id):
            return board
        board = self.boards.update(board)
        logger.info("User %s added to board %s by %s", user_id, board.id, acting_user_id)
        return board

    def remove_member(self, board_id: str, user_id: str, acting_user_id: str) -> Board:
        """Remove a member and clear their assignments on this board."""
        board = self._load(board_id)
        policy.ensure_can_modify_board(acting_user_id, board)

        if not board.remove_member(user_id):
            raise NotFoundError(
                f"User {user_id} is not a member of board {board_id}", code="board.member_not_found"
            )
        board = self.boards.update(board)

        for task in self.tasks.list_by_board(board.id):
            if task.assigned_to == user_id:
                task.assigned_to = None
                self.tasks.update(task)
        logger.info("User %s removed from board %s by %s", user_id, board.id, acting_user_id)
        return board

    def transfer_ownership(self, board_id: str, new_owner_id: str, acting_user_id: str) -> Board:
        board = self._load(board_id)
        policy.ensure_can_modify_board(acting_user_id, board)
        self._active_user(new_owner_id)
        self._check_name_free(board.name, new_owner_id, board.id)

        board.transfer_ownership(new_owner_id)
        board = self.boards.update(board)
        logger.info("Board %s ownership transferred %s -> %s", board.id, acting_user_id, new_owner_id)
        return board

    def deactivate(self, board_id: str, acting_user_id: str) -> Board:
        """Soft-delete the board and physically delete its tasks."""
        board = self._load(board_id)
        policy.ensure_can_modify_board(acting_user_id, board)

        board.deactivate()
        board = self.boards.update(board)
        removed = self.tasks.delete_by_board(board.id)
        logger.info("Board %s deactivated by %s (%d tasks removed)", board.id, acting_user_id, removed)
        return board

    # ---- Reporting ----

    def statistics(self, board_id: str, acting_user_id: str) -> Dict[str, Any]:
        board = self.get(board_id, acting_user_id)
        by_status = self.tasks.count_by_status(board.id)
        now = utcnow()
        return {
            "board_id": board.id,
            "total": sum(by_status.values()),
            "by_status": {status.value: count for status, count in by_status.items()},
            "overdue": len(self.tasks.list_overdue(now, board_id=board.id)),
            "due_soon": len(self.tasks.list_due_soon(settings.DUE_SOON_DAYS, now=now, board_id=board.id)),
            "members": len(board.members),
        }
