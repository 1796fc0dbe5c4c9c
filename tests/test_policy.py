"""
Tests for AuthorizationPolicy decisions and enforcement.
"""
import pytest

from taskboard.core.exceptions import ForbiddenError
from taskboard.domain.entities import Board, Task
from taskboard.domain.policy import AuthorizationPolicy, policy


@pytest.fixture
def board():
    return Board(id="b1", name="Sprint 1", owner_id="owner", members=["member"])


@pytest.fixture
def task():
    return Task(id="t1", title="Fix bug", board_id="b1", created_by="creator", assigned_to="assignee")


def test_board_access(board):
    assert AuthorizationPolicy.can_access_board("owner", board)
    assert AuthorizationPolicy.can_access_board("member", board)
    assert not AuthorizationPolicy.can_access_board("stranger", board)
    assert not AuthorizationPolicy.can_access_board(None, board)
    assert not AuthorizationPolicy.can_access_board("", board)


def test_only_owner_modifies_board(board):
    assert AuthorizationPolicy.can_modify_board("owner", board)
    assert not AuthorizationPolicy.can_modify_board("member", board)


def test_members_create_tasks(board):
    assert AuthorizationPolicy.can_create_task("member", board)
    assert not AuthorizationPolicy.can_create_task("stranger", board)


def test_creator_and_assignee_edit(task):
    assert AuthorizationPolicy.can_edit_task("creator", task)
    assert AuthorizationPolicy.can_edit_task("assignee", task)
    assert not AuthorizationPolicy.can_edit_task("other", task)
    assert AuthorizationPolicy.can_change_task_status("assignee", task)
    assert not AuthorizationPolicy.can_change_task_status("other", task)


def test_unassigned_task_is_not_editable_by_anonymous():
    task = Task(title="T", board_id="b1", created_by="creator")
    assert not AuthorizationPolicy.can_edit_task(None, task)


def test_only_creator_deletes(task):
    assert AuthorizationPolicy.can_delete_task("creator", task)
    assert not AuthorizationPolicy.can_delete_task("assignee", task)


def test_ensure_raises_forbidden_with_code(board, task):
    with pytest.raises(ForbiddenError) as exc:
        policy.ensure_can_access_board("stranger", board)
    assert exc.value.code == "board.access_denied"

    with pytest.raises(ForbiddenError) as exc:
        policy.ensure_can_modify_board("member", board)
    assert exc.value.code == "board.owner_only"

    with pytest.raises(ForbiddenError) as exc:
        policy.ensure_can_delete_task("assignee", task)
    assert exc.value.code == "task.delete_denied"

    policy.ensure_can_edit_task("assignee", task)
