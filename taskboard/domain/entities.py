"""
Domain entities: User, Board and Task.

Entities are plain dataclasses. Mutators enforce the invariants that only
involve the entity itself:

  Board  - owner is always a member; owner cannot be removed
  Task   - tags are de-duplicated case-insensitively; a Done task is locked
  User   - username/email/full_name shape

Cross-entity rules (membership of an assignee, who may do what) live in
policy.py and in the services.
"""
import enum
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from taskboard.core.exceptions import ValidationError


USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{3,30}$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")
PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).+$")

EMAIL_MAX_LENGTH = 100
FULL_NAME_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 50
BOARD_NAME_MAX_LENGTH = 100
BOARD_DESCRIPTION_MAX_LENGTH = 300
TASK_TITLE_MAX_LENGTH = 100
TASK_DESCRIPTION_MAX_LENGTH = 500


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops tzinfo)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class _LookupEnum(str, enum.Enum):
    """String enum that parses loosely: 'in_progress', 'InProgress', 'in progress'."""

    @classmethod
    def from_str(cls, value):
        if isinstance(value, cls):
            return value
        key = re.sub(r"[^a-z0-9]", "", str(value).lower())
        for member in cls:
            if member.value.replace("_", "") == key:
                return member
        allowed = ", ".join(m.value for m in cls)
        raise ValidationError(
            f"Invalid {cls.__name__} '{value}' (expected one of: {allowed})",
            code=f"{cls.__name__.lower()}.invalid",
        )


class TaskStatus(_LookupEnum):
    """Kanban columns. Declaration order is the board's display order."""
    todo = "todo"
    in_progress = "in_progress"
    in_review = "in_review"
    done = "done"
    blocked = "blocked"


class TaskPriority(_LookupEnum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


STATUS_ORDER = {status: index for index, status in enumerate(TaskStatus)}


# ---- Field validation ----

def validate_username(username: str) -> str:
    username = (username or "").strip()
    if not USERNAME_RE.match(username):
        raise ValidationError(
            "Username must be 3-30 characters of letters, digits or underscore",
            code="user.username_invalid",
        )
    return username


def validate_email(email: str) -> str:
    email = (email or "").strip()
    if len(email) > EMAIL_MAX_LENGTH or not EMAIL_RE.match(email):
        raise ValidationError(f"Invalid email address '{email}'", code="user.email_invalid")
    return email


def validate_full_name(full_name: str) -> str:
    full_name = (full_name or "").strip()
    if not full_name:
        raise ValidationError("Full name is required", code="user.full_name_required")
    if len(full_name) > FULL_NAME_MAX_LENGTH:
        raise ValidationError(
            f"Full name cannot exceed {FULL_NAME_MAX_LENGTH} characters",
            code="user.full_name_too_long",
        )
    return full_name


def validate_password(password: str) -> str:
    password = password or ""
    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        raise ValidationError(
            f"Password must be {PASSWORD_MIN_LENGTH}-{PASSWORD_MAX_LENGTH} characters",
            code="user.password_length",
        )
    if not PASSWORD_RE.match(password):
        raise ValidationError(
            "Password must contain a lowercase letter, an uppercase letter and a digit",
            code="user.password_weak",
        )
    return password


def validate_board_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Board name is required", code="board.name_required")
    if len(name) > BOARD_NAME_MAX_LENGTH:
        raise ValidationError(
            f"Board name cannot exceed {BOARD_NAME_MAX_LENGTH} characters",
            code="board.name_too_long",
        )
    return name


def validate_color(color: str) -> str:
    if not COLOR_RE.match(color or ""):
        raise ValidationError(f"Invalid color '{color}', expected #rrggbb", code="board.color_invalid")
    return color.lower()


def validate_task_title(title: str) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("Task title is required", code="task.title_required")
    if len(title) > TASK_TITLE_MAX_LENGTH:
        raise ValidationError(
            f"Task title cannot exceed {TASK_TITLE_MAX_LENGTH} characters",
            code="task.title_too_long",
        )
    return title


def validate_description(description: Optional[str], limit: int, code: str) -> str:
    description = (description or "").strip()
    if len(description) > limit:
        raise ValidationError(f"Description cannot exceed {limit} characters", code=code)
    return description


def validate_due_date(due_date: Optional[datetime], now: Optional[datetime] = None) -> Optional[datetime]:
    """A due date supplied by a caller must lie in the future."""
    if due_date is None:
        return None
    due_date = as_utc(due_date)
    if due_date <= (now or utcnow()):
        raise ValidationError("Due date must be in the future", code="task.due_date_past")
    return due_date


def normalize_tags(tags: Optional[Iterable[str]]) -> List[str]:
    """Strip, drop blanks, de-duplicate case-insensitively keeping the first spelling."""
    seen = set()
    result = []
    for tag in tags or []:
        tag = (tag or "").strip()
        if not tag or tag.lower() in seen:
            continue
        seen.add(tag.lower())
        result.append(tag)
    return result


# ---- Entities ----

@dataclass
class User:
    """Registered user. ``password_hash`` never leaves the service layer."""

    username: str
    email: str
    password_hash: str
    full_name: str
    id: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    def update_profile(self, full_name: Optional[str] = None, email: Optional[str] = None) -> None:
        if full_name is not None:
            self.full_name = validate_full_name(full_name)
        if email is not None:
            self.email = validate_email(email)

    def record_login(self, now: Optional[datetime] = None) -> None:
        self.last_login_at = now or utcnow()

    def deactivate(self) -> None:
        self.is_active = False

    def activate(self) -> None:
        self.is_active = True


@dataclass
class Board:
    """A named collection of tasks. The owner is always one of the members."""

    name: str
    owner_id: str
    description: str = ""
    color: str = "#3498db"
    members: List[str] = field(default_factory=list)
    id: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        members = []
        for member in [self.owner_id, *self.members]:
            if member not in members:
                members.append(member)
        self.members = members

    def is_member(self, user_id: str) -> bool:
        return user_id == self.owner_id or user_id in self.members

    def update(self, name: Optional[str] = None, description: Optional[str] = None,
               color: Optional[str] = None) -> None:
        if name is not None:
            self.name = validate_board_name(name)
        if description is not None:
            self.description = validate_description(
                description, BOARD_DESCRIPTION_MAX_LENGTH, "board.description_too_long"
            )
        if color is not None:
            self.color = validate_color(color)

    def add_member(self, user_id: str) -> bool:
        """Add a member. Returns False if already present."""
        if user_id in self.members:
            return False
        self.members.append(user_id)
        return True

    def remove_member(self, user_id: str) -> bool:
        """Remove a member. Returns False if absent; the owner cannot be removed."""
        if user_id == self.owner_id:
            raise ValidationError(
                "The board owner cannot be removed from the members",
                code="board.owner_required",
            )
        if user_id not in self.members:
            return False
        self.members.remove(user_id)
        return True

    def transfer_ownership(self, new_owner_id: str) -> None:
        if new_owner_id not in self.members:
            raise ValidationError(
                "The new owner must already be a board member",
                code="board.owner_not_member",
            )
        self.owner_id = new_owner_id

    def deactivate(self) -> None:
        self.is_active = False


@dataclass
class Task:
    """A unit of work on exactly one board."""

    title: str
    board_id: str
    created_by: str
    description: str = ""
    status: TaskStatus = TaskStatus.todo
    priority: TaskPriority = TaskPriority.medium
    assigned_to: Optional[str] = None
    due_date: Optional[datetime] = None
    tags: List[str] = field(default_factory=list)
    position: int = 0
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None

    def __post_init__(self):
        self.status = TaskStatus.from_str(self.status)
        self.priority = TaskPriority.from_str(self.priority)
        self.tags = normalize_tags(self.tags)

    @property
    def is_completed(self) -> bool:
        return self.status is TaskStatus.done

    def ensure_not_completed(self, action: str = "edit") -> None:
        """Done-lock: a completed task only accepts status changes."""
        if self.is_completed:
            raise ValidationError(
                f"Cannot {action} a completed task; move it out of Done first",
                code="task.completed_locked",
            )

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        return (
            self.due_date is not None
            and not self.is_completed
            and as_utc(self.due_date) < (now or utcnow())
        )

    def edit(self, title: Optional[str] = None, description: Optional[str] = None,
             priority=None, due_date: Optional[datetime] = None,
             tags: Optional[Iterable[str]] = None) -> None:
        self.ensure_not_completed("edit")
        if title is not None:
            self.title = validate_task_title(title)
        if description is not None:
            self.description = validate_description(
                description, TASK_DESCRIPTION_MAX_LENGTH, "task.description_too_long"
            )
        if priority is not None:
            self.priority = TaskPriority.from_str(priority)
        if due_date is not None:
            self.due_date = as_utc(due_date)
        if tags is not None:
            self.tags = normalize_tags(tags)

    def assign(self, user_id: Optional[str]) -> None:
        self.ensure_not_completed("reassign")
        self.assigned_to = user_id
