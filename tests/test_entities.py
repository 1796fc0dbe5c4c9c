"""
Tests for the domain entities: field validation, Board membership, Task Done-lock.
"""
from datetime import timedelta

import pytest

from taskboard.core.exceptions import ValidationError
from taskboard.domain.entities import (
    Board, Task, TaskPriority, TaskStatus, User, normalize_tags, utcnow,
    validate_color, validate_due_date, validate_email, validate_password, validate_username,
)


# ---- Enums ----

@pytest.mark.parametrize("raw", ["in_progress", "InProgress", "in progress", "IN-PROGRESS"])
def test_status_parses_loosely(raw):
    assert TaskStatus.from_str(raw) is TaskStatus.in_progress


def test_invalid_status_names_the_rule():
    with pytest.raises(ValidationError) as exc:
        TaskStatus.from_str("archived")
    assert exc.value.code == "taskstatus.invalid"
    assert "archived" in exc.value.message


def test_priority_accepts_enum_member():
    assert TaskPriority.from_str(TaskPriority.high) is TaskPriority.high


# ---- Field validation ----

def test_username_rules():
    assert validate_username("  alice_01 ") == "alice_01"
    for bad in ("ab", "a" * 31, "bad name", "dash-name", ""):
        with pytest.raises(ValidationError) as exc:
            validate_username(bad)
        assert exc.value.code == "user.username_invalid"


def test_email_rules():
    assert validate_email("a@b.io") == "a@b.io"
    with pytest.raises(ValidationError):
        validate_email("not-an-email")
    with pytest.raises(ValidationError):
        validate_email("x" * 95 + "@b.com")


def test_password_needs_mixed_case_and_digit():
    assert validate_password("Secret123") == "Secret123"
    with pytest.raises(ValidationError) as exc:
        validate_password("short1A")
    assert exc.value.code == "user.password_length"
    with pytest.raises(ValidationError) as exc:
        validate_password("alllowercase1")
    assert exc.value.code == "user.password_weak"


def test_color_is_lowercased():
    assert validate_color("#AABBCC") == "#aabbcc"
    with pytest.raises(ValidationError):
        validate_color("blue")


def test_due_date_must_be_in_future():
    now = utcnow()
    assert validate_due_date(None) is None
    assert validate_due_date(now + timedelta(hours=1), now=now) == now + timedelta(hours=1)
    with pytest.raises(ValidationError) as exc:
        validate_due_date(now - timedelta(minutes=1), now=now)
    assert exc.value.code == "task.due_date_past"


def test_naive_due_date_is_treated_as_utc():
    now = utcnow()
    naive = (now + timedelta(days=1)).replace(tzinfo=None)
    assert validate_due_date(naive, now=now).tzinfo is not None


def test_tags_deduplicated_case_insensitively():
    assert normalize_tags(["Bug", " bug ", "", "ui", "UI", "backend"]) == ["Bug", "ui", "backend"]


# ---- User ----

def test_user_profile_and_activation():
    user = User(username="alice", email="a@b.io", password_hash="x", full_name="Alice")
    user.update_profile(full_name="  Alice A. ")
    assert user.full_name == "Alice A."
    assert user.email == "a@b.io"
    user.deactivate()
    assert not user.is_active
    user.activate()
    assert user.is_active


# ---- Board ----

def test_owner_is_always_first_member():
    board = Board(name="B", owner_id="u1", members=["u2", "u1", "u2"])
    assert board.members == ["u1", "u2"]


def test_add_member_is_idempotent():
    board = Board(name="B", owner_id="u1")
    assert board.add_member("u2")
    assert not board.add_member("u2")
    assert board.members == ["u1", "u2"]


def test_owner_cannot_be_removed():
    board = Board(name="B", owner_id="u1", members=["u2"])
    with pytest.raises(ValidationError) as exc:
        board.remove_member("u1")
    assert exc.value.code == "board.owner_required"
    assert "u1" in board.members


def test_remove_absent_member_returns_false():
    board = Board(name="B", owner_id="u1")
    assert not board.remove_member("ghost")


def test_transfer_requires_existing_member():
    board = Board(name="B", owner_id="u1", members=["u2"])
    with pytest.raises(ValidationError) as exc:
        board.transfer_ownership("u3")
    assert exc.value.code == "board.owner_not_member"
    board.transfer_ownership("u2")
    assert board.owner_id == "u2"
    assert board.owner_id in board.members


def test_board_update_validates_fields():
    board = Board(name="B", owner_id="u1")
    board.update(name=" Renamed ", color="#FF0000")
    assert board.name == "Renamed"
    assert board.color == "#ff0000"
    with pytest.raises(ValidationError):
        board.update(name="   ")


# ---- Task ----

def test_task_defaults():
    task = Task(title="Fix bug", board_id="b1", created_by="u1")
    assert task.status is TaskStatus.todo
    assert task.priority is TaskPriority.medium
    assert task.completed_at is None
    assert task.tags == []


def test_task_parses_string_enums():
    task = Task(title="T", board_id="b", created_by="u", status="Done", priority="HIGH")
    assert task.status is TaskStatus.done
    assert task.priority is TaskPriority.high


def test_completed_task_rejects_edits():
    task = Task(title="T", board_id="b", created_by="u", status=TaskStatus.done)
    with pytest.raises(ValidationError) as exc:
        task.edit(title="New")
    assert exc.value.code == "task.completed_locked"
    with pytest.raises(ValidationError):
        task.assign("u2")
    assert task.title == "T"


def test_overdue_ignores_done_tasks():
    now = utcnow()
    past = now - timedelta(days=1)
    open_task = Task(title="T", board_id="b", created_by="u", due_date=past)
    done_task = Task(title="T", board_id="b", created_by="u", due_date=past, status="done")
    assert open_task.is_overdue(now)
    assert not done_task.is_overdue(now)
    assert not Task(title="T", board_id="b", created_by="u").is_overdue(now)
