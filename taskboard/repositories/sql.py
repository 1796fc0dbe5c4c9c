"""SQLAlchemy-backed repositories.

Rows are mapped to domain entities on the way out and back on the way in;
nothing outside this module sees an ORM object. Datetimes are stored as naive
UTC and come back timezone-aware.
"""

import json
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from taskboard.core.exceptions import NotFoundError
from taskboard.domain.entities import (
    STATUS_ORDER, Board, Task, TaskPriority, TaskStatus, User, as_utc, utcnow,
)
from taskboard.models.board import BoardMember, BoardRecord
from taskboard.models.task import TaskRecord
from taskboard.models.user import UserRecord
from taskboard.repositories.base import BoardRepository, TaskRepository, UserRepository
from taskboard.repositories.memory import new_id


def _to_db(value: Optional[datetime]) -> Optional[datetime]:
    value = as_utc(value)
    return value.replace(tzinfo=None) if value is not None else None


LIKE_ESCAPE = "\\"


def _like(term: str) -> str:
    """Substring pattern with the user's own % and _ taken literally."""
    escaped = term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2).replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _stamp_create(entity) -> None:
    now = utcnow()
    if not entity.id:
        entity.id = new_id()
    entity.created_at = as_utc(entity.created_at) or now
    entity.updated_at = as_utc(entity.updated_at) or entity.created_at


def _stamp_update(entity, row) -> None:
    entity.created_at = as_utc(row.created_at)
    entity.updated_at = max(utcnow(), as_utc(row.updated_at))


# ---- Users ----

def _user_from_row(row: UserRecord) -> User:
    return User(
        id=row.id,
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        full_name=row.full_name,
        is_active=row.is_active,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
        last_login_at=as_utc(row.last_login_at),
    )


def _user_to_row(user: User, row: UserRecord) -> UserRecord:
    row.username = user.username
    row.email = user.email
    row.password_hash = user.password_hash
    row.full_name = user.full_name
    row.is_active = user.is_active
    row.last_login_at = _to_db(user.last_login_at)
    row.created_at = _to_db(user.created_at)
    row.updated_at = _to_db(user.updated_at)
    return row


class SqlUserRepository(UserRepository):
    """Users stored in the ``users`` table."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> Optional[User]:
        row = self.db.get(UserRecord, user_id) if user_id else None
        return _user_from_row(row) if row else None

    def get_all(self) -> List[User]:
        rows = self.db.query(UserRecord).order_by(UserRecord.created_at).all()
        return [_user_from_row(r) for r in rows]

    def create(self, user: User) -> User:
        _stamp_create(user)
        row = _user_to_row(user, UserRecord(id=user.id))
        self.db.add(row)
        self.db.commit()
        return user

    def update(self, user: User) -> User:
        row = self.db.get(UserRecord, user.id) if user.id else None
        if row is None:
            raise NotFoundError(f"User {user.id} not found")
        _stamp_update(user, row)
        _user_to_row(user, row)
        self.db.commit()
        return user

    def delete(self, user_id: str) -> bool:
        deleted = self.db.query(UserRecord).filter(UserRecord.id == user_id).delete()
        self.db.commit()
        return deleted > 0

    def exists(self, user_id: str) -> bool:
        return self.db.query(UserRecord.id).filter(UserRecord.id == user_id).first() is not None

    def get_by_username(self, username: str) -> Optional[User]:
        row = self.db.query(UserRecord).filter(
            func.lower(UserRecord.username) == (username or "").lower()
        ).first()
        return _user_from_row(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        row = self.db.query(UserRecord).filter(
            func.lower(UserRecord.email) == (email or "").lower()
        ).first()
        return _user_from_row(row) if row else None

    def list_by_active(self, is_active: bool = True) -> List[User]:
        rows = self.db.query(UserRecord).filter(UserRecord.is_active == is_active).all()
        return [_user_from_row(r) for r in rows]

    def search(self, term: str) -> List[User]:
        rows = (
            self.db.query(UserRecord)
            .filter(or_(
                UserRecord.username.ilike(_like(term), escape=LIKE_ESCAPE),
                UserRecord.full_name.ilike(_like(term), escape=LIKE_ESCAPE),
                UserRecord.email.ilike(_like(term), escape=LIKE_ESCAPE),
            ))
            .order_by(func.lower(UserRecord.username))
            .all()
        )
        return [_user_from_row(r) for r in rows]

    def update_last_login(self, user_id: str, when: Optional[datetime] = None) -> bool:
        updated = self.db.query(UserRecord).filter(UserRecord.id == user_id).update(
            {"last_login_at": _to_db(when or utcnow())}
        )
        self.db.commit()
        return updated > 0


# ---- Boards ----

def _board_from_row(row: BoardRecord) -> Board:
    return Board(
        id=row.id,
        name=row.name,
        description=row.description or "",
        color=row.color,
        owner_id=row.owner_id,
        members=[m.user_id for m in row.members],
        is_active=row.is_active,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


def _board_to_row(board: Board, row: BoardRecord) -> BoardRecord:
    row.name = board.name
    row.description = board.description
    row.color = board.color
    row.owner_id = board.owner_id
    row.is_active = board.is_active
    row.created_at = _to_db(board.created_at)
    row.updated_at = _to_db(board.updated_at)

    wanted = list(board.members)
    row.members = [m for m in row.members if m.user_id in wanted]
    present = {m.user_id for m in row.members}
    for user_id in wanted:
        if user_id not in present:
            row.members.append(BoardMember(user_id=user_id))
    return row


class SqlBoardRepository(BoardRepository):
    """Boards stored in ``boards`` with membership in ``board_members``."""

    def __init__(self, db: Session):
        self.db = db

    def _accessible_query(self, user_id: str):
        member_boards = select(BoardMember.board_id).where(BoardMember.user_id == user_id)
        return self.db.query(BoardRecord).filter(
            BoardRecord.is_active == True,  # noqa: E712
            or_(BoardRecord.owner_id == user_id, BoardRecord.id.in_(member_boards)),
        )

    def get_by_id(self, board_id: str) -> Optional[Board]:
        row = self.db.get(BoardRecord, board_id) if board_id else None
        return _board_from_row(row) if row else None

    def get_all(self) -> List[Board]:
        rows = self.db.query(BoardRecord).order_by(BoardRecord.created_at).all()
        return [_board_from_row(r) for r in rows]

    def create(self, board: Board) -> Board:
        _stamp_create(board)
        row = _board_to_row(board, BoardRecord(id=board.id))
        self.db.add(row)
        self.db.commit()
        return board

    def update(self, board: Board) -> Board:
        row = self.db.get(BoardRecord, board.id) if board.id else None
        if row is None:
            raise NotFoundError(f"Board {board.id} not found")
        _stamp_update(board, row)
        _board_to_row(board, row)
        self.db.commit()
        return board

    def delete(self, board_id: str) -> bool:
        row = self.db.get(BoardRecord, board_id) if board_id else None
        self.db.query(TaskRecord).filter(TaskRecord.board_id == board_id).delete()
        if row is not None:
            self.db.delete(row)
        self.db.commit()
        return row is not None

    def exists(self, board_id: str) -> bool:
        return self.db.query(BoardRecord.id).filter(BoardRecord.id == board_id).first() is not None

    def list_by_owner(self, owner_id: str) -> List[Board]:
        rows = self.db.query(BoardRecord).filter(BoardRecord.owner_id == owner_id).all()
        return [_board_from_row(r) for r in rows]

    def list_by_member(self, user_id: str) -> List[Board]:
        rows = (
            self.db.query(BoardRecord)
            .join(BoardMember, BoardMember.board_id == BoardRecord.id)
            .filter(BoardMember.user_id == user_id)
            .all()
        )
        return [_board_from_row(r) for r in rows]

    def list_accessible(self, user_id: str) -> List[Board]:
        rows = self._accessible_query(user_id).order_by(BoardRecord.created_at).all()
        return [_board_from_row(r) for r in rows]

    def search(self, term: str, user_id: str) -> List[Board]:
        rows = (
            self._accessible_query(user_id)
            .filter(or_(
                BoardRecord.name.ilike(_like(term), escape=LIKE_ESCAPE),
                BoardRecord.description.ilike(_like(term), escape=LIKE_ESCAPE),
            ))
            .order_by(BoardRecord.created_at)
            .all()
        )
        return [_board_from_row(r) for r in rows]

    def name_exists(self, name: str, owner_id: str, exclude_id: Optional[str] = None) -> bool:
        query = self.db.query(BoardRecord.id).filter(
            BoardRecord.owner_id == owner_id,
            BoardRecord.is_active == True,  # noqa: E712
            func.lower(BoardRecord.name) == (name or "").strip().lower(),
        )
        if exclude_id:
            query = query.filter(BoardRecord.id != exclude_id)
        return query.first() is not None


# ---- Tasks ----

def _task_from_row(row: TaskRecord) -> Task:
    return Task(
        id=row.id,
        title=row.title,
        description=row.description or "",
        status=row.status,
        priority=row.priority,
        board_id=row.board_id,
        created_by=row.created_by,
        assigned_to=row.assigned_to,
        due_date=as_utc(row.due_date),
        tags=json.loads(row.tags_json) if row.tags_json else [],
        position=row.position,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
        completed_at=as_utc(row.completed_at),
        completed_by=row.completed_by,
    )


def _task_to_row(task: Task, row: TaskRecord) -> TaskRecord:
    row.title = task.title
    row.description = task.description
    row.status = task.status
    row.priority = task.priority
    row.board_id = task.board_id
    row.created_by = task.created_by
    row.assigned_to = task.assigned_to
    row.due_date = _to_db(task.due_date)
    row.tags_json = json.dumps(task.tags, ensure_ascii=False) if task.tags else None
    row.position = task.position
    row.created_at = _to_db(task.created_at)
    row.updated_at = _to_db(task.updated_at)
    row.completed_at = _to_db(task.completed_at)
    row.completed_by = task.completed_by
    return row


def _by_bucket(tasks: List[Task]) -> List[Task]:
    return sorted(tasks, key=lambda t: (STATUS_ORDER[t.status], t.position))


class SqlTaskRepository(TaskRepository):
    """Tasks stored in the ``tasks`` table."""

    def __init__(self, db: Session):
        self.db = db

    def _scoped(self, board_id: Optional[str]):
        query = self.db.query(TaskRecord)
        if board_id is not None:
            query = query.filter(TaskRecord.board_id == board_id)
        return query

    def get_by_id(self, task_id: str) -> Optional[Task]:
        row = self.db.get(TaskRecord, task_id) if task_id else None
        return _task_from_row(row) if row else None

    def get_all(self) -> List[Task]:
        rows = self.db.query(TaskRecord).order_by(TaskRecord.created_at).all()
        return [_task_from_row(r) for r in rows]

    def create(self, task: Task) -> Task:
        _stamp_create(task)
        row = _task_to_row(task, TaskRecord(id=task.id))
        self.db.add(row)
        self.db.commit()
        return task

    def update(self, task: Task) -> Task:
        row = self.db.get(TaskRecord, task.id) if task.id else None
        if row is None:
            raise NotFoundError(f"Task {task.id} not found")
        _stamp_update(task, row)
        _task_to_row(task, row)
        self.db.commit()
        return task

    def delete(self, task_id: str) -> bool:
        deleted = self.db.query(TaskRecord).filter(TaskRecord.id == task_id).delete()
        self.db.commit()
        return deleted > 0

    def exists(self, task_id: str) -> bool:
        return self.db.query(TaskRecord.id).filter(TaskRecord.id == task_id).first() is not None

    def list_by_board(self, board_id: str) -> List[Task]:
        rows = self._scoped(board_id).all()
        return _by_bucket([_task_from_row(r) for r in rows])

    def list_by_status(self, board_id: str, status: TaskStatus) -> List[Task]:
        rows = (
            self._scoped(board_id)
            .filter(TaskRecord.status == TaskStatus.from_str(status))
            .order_by(TaskRecord.position)
            .all()
        )
        return [_task_from_row(r) for r in rows]

    def list_by_assignee(self, user_id: str) -> List[Task]:
        rows = self.db.query(TaskRecord).filter(TaskRecord.assigned_to == user_id).all()
        return [_task_from_row(r) for r in rows]

    def list_by_creator(self, user_id: str) -> List[Task]:
        rows = self.db.query(TaskRecord).filter(TaskRecord.created_by == user_id).all()
        return [_task_from_row(r) for r in rows]

    def list_by_priority(self, priority: TaskPriority, board_id: Optional[str] = None) -> List[Task]:
        rows = self._scoped(board_id).filter(
            TaskRecord.priority == TaskPriority.from_str(priority)
        ).all()
        return [_task_from_row(r) for r in rows]

    def list_by_tag(self, tag: str, board_id: Optional[str] = None) -> List[Task]:
        tag = (tag or "").strip().lower()
        # Matched in Python: SQLite lower() only folds ASCII.
        rows = self._scoped(board_id).filter(TaskRecord.tags_json.isnot(None)).all()
        tasks = [_task_from_row(r) for r in rows]
        return [t for t in tasks if tag in (x.lower() for x in t.tags)]

    def list_due_between(self, start: datetime, end: datetime,
                         board_id: Optional[str] = None) -> List[Task]:
        rows = (
            self._scoped(board_id)
            .filter(TaskRecord.due_date.isnot(None))
            .filter(TaskRecord.due_date >= _to_db(start), TaskRecord.due_date <= _to_db(end))
            .order_by(TaskRecord.due_date)
            .all()
        )
        return [_task_from_row(r) for r in rows]

    def list_overdue(self, now: Optional[datetime] = None,
                     board_id: Optional[str] = None) -> List[Task]:
        rows = (
            self._scoped(board_id)
            .filter(TaskRecord.due_date.isnot(None))
            .filter(TaskRecord.due_date < _to_db(now or utcnow()))
            .filter(TaskRecord.status != TaskStatus.done)
            .order_by(TaskRecord.due_date)
            .all()
        )
        return [_task_from_row(r) for r in rows]

    def search(self, term: str, board_id: Optional[str] = None) -> List[Task]:
        rows = self._scoped(board_id).filter(or_(
            TaskRecord.title.ilike(_like(term), escape=LIKE_ESCAPE),
            TaskRecord.description.ilike(_like(term), escape=LIKE_ESCAPE),
        )).all()
        return [_task_from_row(r) for r in rows]

    def update_positions(self, positions: Dict[str, int]) -> bool:
        found_all = True
        for task_id, position in positions.items():
            row = self.db.get(TaskRecord, task_id)
            if row is None:
                found_all = False
                continue
            row.position = position
            row.updated_at = _to_db(max(utcnow(), as_utc(row.updated_at)))
        self.db.commit()
        return found_all

    def delete_by_board(self, board_id: str) -> int:
        deleted = self.db.query(TaskRecord).filter(TaskRecord.board_id == board_id).delete()
        self.db.commit()
        return deleted

    def count_by_status(self, board_id: str) -> Dict[TaskStatus, int]:
        counts = {status: 0 for status in TaskStatus}
        rows = (
            self.db.query(TaskRecord.status, func.count(TaskRecord.id))
            .filter(TaskRecord.board_id == board_id)
            .group_by(TaskRecord.status)
            .all()
        )
        for status, count in rows:
            counts[TaskStatus.from_str(status)] = count
        return counts
