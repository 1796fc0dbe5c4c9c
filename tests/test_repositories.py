"""
Contract tests shared by the in-memory and SQLAlchemy repositories.
"""
from datetime import timedelta

import pytest

from taskboard.core.exceptions import NotFoundError
from taskboard.domain.entities import Board, Task, TaskPriority, TaskStatus, User, utcnow
from taskboard.repositories.memory import (
    InMemoryBoardRepository, InMemoryTaskRepository, InMemoryUserRepository,
)
from taskboard.repositories.sql import SqlBoardRepository, SqlTaskRepository, SqlUserRepository


@pytest.fixture(params=["memory", "sql"])
def repos(request):
    if request.param == "memory":
        tasks = InMemoryTaskRepository()
        return InMemoryUserRepository(), InMemoryBoardRepository(tasks), tasks
    db = request.getfixturevalue("db_session")
    return SqlUserRepository(db), SqlBoardRepository(db), SqlTaskRepository(db)


@pytest.fixture
def users(repos):
    return repos[0]


@pytest.fixture
def boards(repos):
    return repos[1]


@pytest.fixture
def tasks(repos):
    return repos[2]


def _user(username="alice", email=None):
    return User(
        username=username,
        email=email or f"{username}@example.com",
        password_hash="hash",
        full_name=username.title(),
    )


def _task(board_id, title="Task", status=TaskStatus.todo, position=0, **kwargs):
    return Task(title=title, board_id=board_id, created_by="u1", status=status,
                position=position, **kwargs)


# ---- Common CRUD ----

def test_get_unknown_returns_none(users, boards, tasks):
    assert users.get_by_id("missing") is None
    assert boards.get_by_id("missing") is None
    assert tasks.get_by_id("missing") is None


def test_empty_lists_are_lists(users, boards, tasks):
    assert users.get_all() == []
    assert boards.list_accessible("nobody") == []
    assert tasks.list_by_board("nothing") == []
    assert tasks.list_overdue() == []


def test_create_assigns_id_and_timestamps(users):
    user = users.create(_user())
    assert user.id
    assert user.created_at is not None
    assert user.updated_at >= user.created_at
    assert users.exists(user.id)


def test_update_preserves_id_and_created_at(users):
    created = users.create(_user())
    created_at = created.created_at
    updated_before = created.updated_at

    fetched = users.get_by_id(created.id)
    fetched.full_name = "Alice Updated"
    updated = users.update(fetched)

    assert updated.id == created.id
    assert updated.created_at == created_at
    assert updated.updated_at >= updated_before
    assert users.get_by_id(created.id).full_name == "Alice Updated"


def test_update_unknown_raises_not_found(users, tasks):
    ghost = _user()
    ghost.id = "ghost"
    with pytest.raises(NotFoundError):
        users.update(ghost)
    with pytest.raises(NotFoundError):
        tasks.update(_task("b1"))


def test_delete_is_idempotent(users, tasks):
    user = users.create(_user())
    assert users.delete(user.id) is True
    assert users.delete(user.id) is False
    assert users.get_by_id(user.id) is None

    task = tasks.create(_task("b1"))
    assert tasks.delete(task.id) is True
    assert tasks.delete(task.id) is False


# ---- Users ----

def test_user_lookups_are_case_insensitive(users):
    users.create(_user("Alice", "Alice@Example.com"))
    assert users.get_by_username("alice").username == "Alice"
    assert users.get_by_email("ALICE@example.COM") is not None
    assert users.username_exists("ALICE")
    assert not users.email_exists("bob@example.com")


def test_user_search_and_active_filter(users):
    alice = users.create(_user("alice"))
    users.create(_user("bob"))
    alice.deactivate()
    users.update(alice)

    assert [u.username for u in users.search("ali")] == ["alice"]
    assert [u.username for u in users.list_by_active(True)] == ["bob"]
    assert [u.username for u in users.list_by_active(False)] == ["alice"]


def test_update_last_login(users):
    user = users.create(_user())
    when = utcnow()
    assert users.update_last_login(user.id, when)
    assert users.get_by_id(user.id).last_login_at is not None
    assert not users.update_last_login("ghost", when)


# ---- Boards ----

def test_board_membership_round_trips(boards):
    board = boards.create(Board(name="Sprint 1", owner_id="u1", members=["u2"]))
    fetched = boards.get_by_id(board.id)
    assert fetched.members == ["u1", "u2"]

    fetched.add_member("u3")
    fetched.remove_member("u2")
    boards.update(fetched)
    assert boards.get_by_id(board.id).members == ["u1", "u3"]


def test_accessible_boards_skip_inactive(boards):
    owned = boards.create(Board(name="Mine", owner_id="u1"))
    shared = boards.create(Board(name="Shared", owner_id="u2", members=["u1"]))
    other = boards.create(Board(name="Other", owner_id="u2"))
    gone = boards.create(Board(name="Gone", owner_id="u1"))
    gone.deactivate()
    boards.update(gone)

    assert {b.id for b in boards.list_accessible("u1")} == {owned.id, shared.id}
    assert [b.id for b in boards.search("shar", "u1")] == [shared.id]
    assert {b.id for b in boards.list_by_member("u1")} == {owned.id, shared.id, gone.id}
    assert {b.id for b in boards.list_by_owner("u2")} == {shared.id, other.id}


def test_board_delete_removes_its_tasks(boards, tasks):
    board = boards.create(Board(name="Sprint 1", owner_id="u1", members=["u2"]))
    other = boards.create(Board(name="Other", owner_id="u1"))
    tasks.create(_task(board.id, "a"))
    tasks.create(_task(board.id, "b", TaskStatus.done))
    keep = tasks.create(_task(other.id, "c"))

    assert boards.delete(board.id) is True
    assert boards.get_by_id(board.id) is None
    assert tasks.list_by_board(board.id) == []
    assert tasks.get_by_id(keep.id) is not None
    assert boards.delete(board.id) is False


def test_search_treats_wildcards_literally(boards, tasks, users):
    boards.create(Board(name="100% done", owner_id="u1"))
    boards.create(Board(name="1000 things", owner_id="u1"))
    assert [b.name for b in boards.search("100%", "u1")] == ["100% done"]

    tasks.create(_task("b1", "a_b"))
    tasks.create(_task("b1", "axb", position=1))
    assert [t.title for t in tasks.search("a_b")] == ["a_b"]

    users.create(_user("bob"))
    assert users.search("_") == []


def test_board_name_exists_per_owner(boards):
    board = boards.create(Board(name="Sprint 1", owner_id="u1"))
    assert boards.name_exists("sprint 1", "u1")
    assert not boards.name_exists("Sprint 1", "u2")
    assert not boards.name_exists("Sprint 1", "u1", exclude_id=board.id)


# ---- Tasks ----

def test_list_by_board_orders_by_column_then_position(tasks):
    tasks.create(_task("b1", "done-0", TaskStatus.done, 0))
    tasks.create(_task("b1", "todo-1", TaskStatus.todo, 1))
    tasks.create(_task("b1", "todo-0", TaskStatus.todo, 0))
    tasks.create(_task("b1", "ip-0", TaskStatus.in_progress, 0))
    tasks.create(_task("b2", "elsewhere"))

    assert [t.title for t in tasks.list_by_board("b1")] == ["todo-0", "todo-1", "ip-0", "done-0"]
    assert [t.title for t in tasks.list_by_status("b1", "todo")] == ["todo-0", "todo-1"]


def test_task_filters(tasks):
    tasks.create(_task("b1", "Fix login", priority=TaskPriority.high, tags=["Bug", "auth"],
                       assigned_to="u2"))
    tasks.create(_task("b1", "Write docs", position=1, description="login page docs",
                       tags=["docs"]))
    tasks.create(_task("b2", "Other", priority=TaskPriority.high, tags=["bug"]))
    tasks.create(_task("b2", "Menu", position=1, tags=["Café"]))

    assert [t.title for t in tasks.list_by_assignee("u2")] == ["Fix login"]
    assert len(tasks.list_by_creator("u1")) == 4
    assert [t.title for t in tasks.list_by_priority("high", board_id="b1")] == ["Fix login"]
    assert {t.title for t in tasks.list_by_tag("BUG")} == {"Fix login", "Other"}
    assert tasks.list_by_tag("bu") == []
    assert [t.tags for t in tasks.list_by_tag("CAFÉ")] == [["Café"]]
    assert {t.title for t in tasks.search("login", board_id="b1")} == {"Fix login", "Write docs"}


def test_due_date_queries(tasks):
    now = utcnow()
    tasks.create(_task("b1", "late", due_date=now - timedelta(days=1)))
    tasks.create(_task("b1", "late but done", TaskStatus.done, due_date=now - timedelta(days=2)))
    tasks.create(_task("b1", "soon", position=1, due_date=now + timedelta(days=1)))
    tasks.create(_task("b1", "later", position=2, due_date=now + timedelta(days=10)))

    assert [t.title for t in tasks.list_overdue(now)] == ["late"]
    assert [t.title for t in tasks.list_overdue(now, board_id="b2")] == []
    assert [t.title for t in tasks.list_due_soon(3, now=now)] == ["soon"]
    window = tasks.list_due_between(now - timedelta(days=3), now + timedelta(days=3))
    assert [t.title for t in window] == ["late but done", "late", "soon"]


def test_update_positions_and_count(tasks):
    a = tasks.create(_task("b1", "a", position=0))
    b = tasks.create(_task("b1", "b", position=1))
    tasks.create(_task("b1", "c", TaskStatus.done))

    assert tasks.update_positions({a.id: 1, b.id: 0})
    assert [t.title for t in tasks.list_by_status("b1", TaskStatus.todo)] == ["b", "a"]
    assert not tasks.update_positions({"ghost": 3})

    counts = tasks.count_by_status("b1")
    assert counts[TaskStatus.todo] == 2
    assert counts[TaskStatus.done] == 1
    assert counts[TaskStatus.blocked] == 0
    assert set(counts) == set(TaskStatus)


def test_delete_by_board(tasks):
    tasks.create(_task("b1", "a"))
    tasks.create(_task("b1", "b", position=1))
    keep = tasks.create(_task("b2", "c"))
    assert tasks.delete_by_board("b1") == 2
    assert tasks.list_by_board("b1") == []
    assert tasks.get_by_id(keep.id) is not None


def test_returned_entities_are_detached(tasks):
    task = tasks.create(_task("b1", "original"))
    fetched = tasks.get_by_id(task.id)
    fetched.title = "changed locally"
    assert tasks.get_by_id(task.id).title == "original"
