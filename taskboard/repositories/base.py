"""Abstract repository ports, one per aggregate.

Every implementation must honor the same contract so services never need
defensive handling:

- ``get_by_id`` returns None for an unknown id, it never raises.
- list queries return a (possibly empty) list, never None.
- ``create`` assigns ``id`` and ``created_at``/``updated_at`` when unset.
- ``update`` keeps the stored ``created_at``, moves ``updated_at`` forward and
  raises NotFoundError for an unknown id.
- ``delete`` is idempotent: True only when something was removed.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from taskboard.domain.entities import Board, Task, TaskPriority, TaskStatus, User, utcnow


class UserRepository(ABC):
    """Persistence port for users."""

    @abstractmethod
    def get_by_id(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    def get_all(self) -> List[User]:
        ...

    @abstractmethod
    def create(self, user: User) -> User:
        ...

    @abstractmethod
    def update(self, user: User) -> User:
        ...

    @abstractmethod
    def delete(self, user_id: str) -> bool:
        ...

    @abstractmethod
    def exists(self, user_id: str) -> bool:
        ...

    @abstractmethod
    def get_by_username(self, username: str) -> Optional[User]:
        """Case-insensitive lookup."""
        ...

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup."""
        ...

    def username_exists(self, username: str) -> bool:
        return self.get_by_username(username) is not None

    def email_exists(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    @abstractmethod
    def list_by_active(self, is_active: bool = True) -> List[User]:
        ...

    @abstractmethod
    def search(self, term: str) -> List[User]:
        """Match ``term`` against username, full name and email."""
        ...

    @abstractmethod
    def update_last_login(self, user_id: str, when: Optional[datetime] = None) -> bool:
        ...


class BoardRepository(ABC):
    """Persistence port for boards."""

    @abstractmethod
    def get_by_id(self, board_id: str) -> Optional[Board]:
        ...

    @abstractmethod
    def get_all(self) -> List[Board]:
        ...

    @abstractmethod
    def create(self, board: Board) -> Board:
        ...

    @abstractmethod
    def update(self, board: Board) -> Board:
        ...

    @abstractmethod
    def delete(self, board_id: str) -> bool:
        """Physically delete a board together with every task on it."""
        ...

    @abstractmethod
    def exists(self, board_id: str) -> bool:
        ...

    @abstractmethod
    def list_by_owner(self, owner_id: str) -> List[Board]:
        ...

    @abstractmethod
    def list_by_member(self, user_id: str) -> List[Board]:
        ...

    @abstractmethod
    def list_accessible(self, user_id: str) -> List[Board]:
        """Active boards the user owns or is a member of."""
        ...

    @abstractmethod
    def search(self, term: str, user_id: str) -> List[Board]:
        """Match ``term`` against name and description of the user's accessible boards."""
        ...

    @abstractmethod
    def name_exists(self, name: str, owner_id: str, exclude_id: Optional[str] = None) -> bool:
        """True if the owner already has an active board with this name (case-insensitive)."""
        ...


class TaskRepository(ABC):
    """Persistence port for tasks."""

    @abstractmethod
    def get_by_id(self, task_id: str) -> Optional[Task]:
        ...

    @abstractmethod
    def get_all(self) -> List[Task]:
        ...

    @abstractmethod
    def create(self, task: Task) -> Task:
        ...

    @abstractmethod
    def update(self, task: Task) -> Task:
        ...

    @abstractmethod
    def delete(self, task_id: str) -> bool:
        ...

    @abstractmethod
    def exists(self, task_id: str) -> bool:
        ...

    @abstractmethod
    def list_by_board(self, board_id: str) -> List[Task]:
        """Tasks of a board ordered by column, then position."""
        ...

    @abstractmethod
    def list_by_status(self, board_id: str, status: TaskStatus) -> List[Task]:
        """One (board, status) bucket ordered by position."""
        ...

    @abstractmethod
    def list_by_assignee(self, user_id: str) -> List[Task]:
        ...

    @abstractmethod
    def list_by_creator(self, user_id: str) -> List[Task]:
        ...

    @abstractmethod
    def list_by_priority(self, priority: TaskPriority, board_id: Optional[str] = None) -> List[Task]:
        ...

    @abstractmethod
    def list_by_tag(self, tag: str, board_id: Optional[str] = None) -> List[Task]:
        """Case-insensitive tag match."""
        ...

    @abstractmethod
    def list_due_between(self, start: datetime, end: datetime,
                         board_id: Optional[str] = None) -> List[Task]:
        """Tasks with ``start <= due_date <= end``, ordered by due date."""
        ...

    @abstractmethod
    def list_overdue(self, now: Optional[datetime] = None,
                     board_id: Optional[str] = None) -> List[Task]:
        """Tasks past their due date that are not Done."""
        ...

    @abstractmethod
    def search(self, term: str, board_id: Optional[str] = None) -> List[Task]:
        """Match ``term`` against title and description."""
        ...

    @abstractmethod
    def update_positions(self, positions: Dict[str, int]) -> bool:
        """Bulk-write positions. True if every id was found."""
        ...

    @abstractmethod
    def delete_by_board(self, board_id: str) -> int:
        """Physically delete every task of a board. Returns the count removed."""
        ...

    @abstractmethod
    def count_by_status(self, board_id: str) -> Dict[TaskStatus, int]:
        """Counts for every status (zero included)."""
        ...

    def list_due_soon(self, days: int = 3, now: Optional[datetime] = None,
                      board_id: Optional[str] = None) -> List[Task]:
        """Not-Done tasks due within the next ``days`` days."""
        now = now or utcnow()
        return [
            t for t in self.list_due_between(now, now + timedelta(days=days), board_id)
            if not t.is_completed
        ]
