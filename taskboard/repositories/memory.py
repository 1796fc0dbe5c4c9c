"""Dict-backed repositories.

Entities are copied on the way in and out, so a caller mutating a returned
entity changes nothing until it calls ``update``, as with a real database.
Used by tests and as a zero-setup backend.
"""

import copy
import uuid
from datetime import datetime
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from taskboard.core.exceptions import NotFoundError
from taskboard.domain.entities import (
    STATUS_ORDER, Board, Task, TaskPriority, TaskStatus, User, as_utc, utcnow,
)
from taskboard.repositories.base import BoardRepository, TaskRepository, UserRepository

T = TypeVar("T")


def new_id() -> str:
    return uuid.uuid4().hex


def _contains(haystack: Optional[str], term: str) -> bool:
    return term.lower() in (haystack or "").lower()


class _InMemoryStore(Generic[T]):
    """Shared CRUD for the in-memory repositories."""

    kind = "Entity"

    def __init__(self):
        self._items: Dict[str, T] = {}

    def _select(self, predicate: Callable[[T], bool] = lambda _: True) -> List[T]:
        return [copy.deepcopy(item) for item in self._items.values() if predicate(item)]

    def get_by_id(self, item_id: str) -> Optional[T]:
        item = self._items.get(item_id)
        return copy.deepcopy(item) if item is not None else None

    def get_all(self) -> List[T]:
        return self._select()

    def create(self, entity: T) -> T:
        now = utcnow()
        if not entity.id:
            entity.id = new_id()
        entity.created_at = as_utc(entity.created_at) or now
        entity.updated_at = as_utc(entity.updated_at) or entity.created_at
        self._items[entity.id] = copy.deepcopy(entity)
        return copy.deepcopy(entity)

    def update(self, entity: T) -> T:
        stored = self._items.get(entity.id) if entity.id else None
        if stored is None:
            raise NotFoundError(f"{self.kind} {entity.id} not found")
        entity.created_at = stored.created_at
        entity.updated_at = max(utcnow(), as_utc(stored.updated_at))
        self._items[entity.id] = copy.deepcopy(entity)
        return copy.deepcopy(entity)

    def delete(self, item_id: str) -> bool:
        return self._items.pop(item_id, None) is not None

    def exists(self, item_id: str) -> bool:
        return item_id in self._items


class InMemoryUserRepository(_InMemoryStore[User], UserRepository):
    kind = "User"

    def get_by_username(self, username: str) -> Optional[User]:
        found = self._select(lambda u: u.username.lower() == (username or "").lower())
        return found[0] if found else None

    def get_by_email(self, email: str) -> Optional[User]:
        found = self._select(lambda u: u.email.lower() == (email or "").lower())
        return found[0] if found else None

    def list_by_active(self, is_active: bool = True) -> List[User]:
        return self._select(lambda u: u.is_active == is_active)

    def search(self, term: str) -> List[User]:
        return sorted(
            self._select(lambda u: any(_contains(v, term) for v in (u.username, u.full_name, u.email))),
            key=lambda u: u.username.lower(),
        )

    def update_last_login(self, user_id: str, when: Optional[datetime] = None) -> bool:
        user = self._items.get(user_id)
        if user is None:
            return False
        user.record_login(when)
        return True


class InMemoryBoardRepository(_InMemoryStore[Board], BoardRepository):
    kind = "Board"

    def __init__(self, tasks: "InMemoryTaskRepository"):
        super().__init__()
        self.tasks = tasks

    def delete(self, board_id: str) -> bool:
        self.tasks.delete_by_board(board_id)
        return super().delete(board_id)

    def list_by_owner(self, owner_id: str) -> List[Board]:
        return self._select(lambda b: b.owner_id == owner_id)

    def list_by_member(self, user_id: str) -> List[Board]:
        return self._select(lambda b: user_id in b.members)

    def list_accessible(self, user_id: str) -> List[Board]:
        return sorted(
            self._select(lambda b: b.is_active and b.is_member(user_id)),
            key=lambda b: b.created_at,
        )

    def search(self, term: str, user_id: str) -> List[Board]:
        return [
            b for b in self.list_accessible(user_id)
            if _contains(b.name, term) or _contains(b.description, term)
        ]

    def name_exists(self, name: str, owner_id: str, exclude_id: Optional[str] = None) -> bool:
        name = (name or "").strip().lower()
        return any(
            b.is_active and b.owner_id == owner_id and b.name.lower() == name and b.id != exclude_id
            for b in self._items.values()
        )


class InMemoryTaskRepository(_InMemoryStore[Task], TaskRepository):
    kind = "Task"

    def list_by_board(self, board_id: str) -> List[Task]:
        return sorted(
            self._select(lambda t: t.board_id == board_id),
            key=lambda t: (STATUS_ORDER[t.status], t.position),
        )

    def list_by_status(self, board_id: str, status: TaskStatus) -> List[Task]:
        status = TaskStatus.from_str(status)
        return sorted(
            self._select(lambda t: t.board_id == board_id and t.status is status),
            key=lambda t: t.position,
        )

    def list_by_assignee(self, user_id: str) -> List[Task]:
        return self._select(lambda t: t.assigned_to == user_id)

    def list_by_creator(self, user_id: str) -> List[Task]:
        return self._select(lambda t: t.created_by == user_id)

    def list_by_priority(self, priority: TaskPriority, board_id: Optional[str] = None) -> List[Task]:
        priority = TaskPriority.from_str(priority)
        return self._select(
            lambda t: t.priority is priority and (board_id is None or t.board_id == board_id)
        )

    def list_by_tag(self, tag: str, board_id: Optional[str] = None) -> List[Task]:
        tag = (tag or "").strip().lower()
        return self._select(
            lambda t: tag in (x.lower() for x in t.tags)
            and (board_id is None or t.board_id == board_id)
        )

    def list_due_between(self, start: datetime, end: datetime,
                         board_id: Optional[str] = None) -> List[Task]:
        start, end = as_utc(start), as_utc(end)
        return sorted(
            self._select(
                lambda t: t.due_date is not None
                and start <= as_utc(t.due_date) <= end
                and (board_id is None or t.board_id == board_id)
            ),
            key=lambda t: t.due_date,
        )

    def list_overdue(self, now: Optional[datetime] = None,
                     board_id: Optional[str] = None) -> List[Task]:
        now = as_utc(now) or utcnow()
        return sorted(
            self._select(
                lambda t: t.is_overdue(now) and (board_id is None or t.board_id == board_id)
            ),
            key=lambda t: t.due_date,
        )

    def search(self, term: str, board_id: Optional[str] = None) -> List[Task]:
        return self._select(
            lambda t: (_contains(t.title, term) or _contains(t.description, term))
            and (board_id is None or t.board_id == board_id)
        )

    def update_positions(self, positions: Dict[str, int]) -> bool:
        found_all = True
        for task_id, position in positions.items():
            task = self._items.get(task_id)
            if task is None:
                found_all = False
                continue
            task.position = position
            task.updated_at = max(utcnow(), task.updated_at)
        return found_all

    def delete_by_board(self, board_id: str) -> int:
        doomed = [task_id for task_id, t in self._items.items() if t.board_id == board_id]
        for task_id in doomed:
            del self._items[task_id]
        return len(doomed)

    def count_by_status(self, board_id: str) -> Dict[TaskStatus, int]:
        counts = {status: 0 for status in TaskStatus}
        for task in self._items.values():
            if task.board_id == board_id:
                counts[task.status] += 1
        return counts
