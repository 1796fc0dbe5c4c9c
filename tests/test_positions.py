"""
Tests for PositionReorderer: every bucket stays numbered 0..n-1.
"""
import pytest

from taskboard.core.exceptions import ValidationError
from taskboard.domain.entities import Task, TaskStatus
from taskboard.domain.positions import PositionReorderer, reorderer


def _bucket(*titles, status=TaskStatus.todo):
    return [
        Task(id=title, title=title, board_id="b1", created_by="u1", status=status, position=i)
        for i, title in enumerate(titles)
    ]


def _titles(bucket):
    return [t.title for t in sorted(bucket, key=lambda t: t.position)]


def _dense(bucket):
    return sorted(t.position for t in bucket) == list(range(len(bucket)))


def test_renumber_reports_only_moved_tasks():
    bucket = _bucket("a", "b", "c")
    bucket[1].position = 5
    changed = PositionReorderer.renumber([bucket[0], bucket[2], bucket[1]])
    assert {t.title for t in changed} == {"b", "c"}
    assert _titles(bucket) == ["a", "c", "b"]


@pytest.mark.parametrize("from_index,to_index,expected", [
    (0, 2, ["b", "c", "a"]),
    (2, 0, ["c", "a", "b"]),
    (1, 1, ["a", "b", "c"]),
    (0, 99, ["b", "c", "a"]),
])
def test_reorder_within_column(from_index, to_index, expected):
    bucket = _bucket("a", "b", "c")
    reorderer.reorder_within_column(bucket, from_index, to_index)
    assert _titles(bucket) == expected
    assert _dense(bucket)


def test_reorder_rejects_bad_indexes():
    bucket = _bucket("a", "b")
    with pytest.raises(ValidationError) as exc:
        reorderer.reorder_within_column(bucket, 5, 0)
    assert exc.value.code == "position.invalid_index"
    with pytest.raises(ValidationError):
        reorderer.reorder_within_column(bucket, 0, -1)


def test_move_across_columns_closes_gap_and_inserts():
    source = _bucket("a", "b", "c")
    target = _bucket("x", "y", status=TaskStatus.in_progress)
    moving = source[1]

    changed = reorderer.move_across_columns(moving, source, target, "in_progress", 1, actor_id="u1")

    remaining = [t for t in source if t is not moving]
    assert _titles(remaining) == ["a", "c"]
    assert _dense(remaining)
    new_target = target + [moving]
    assert _titles(new_target) == ["x", "b", "y"]
    assert _dense(new_target)
    assert moving.status is TaskStatus.in_progress
    assert moving in changed
    assert {t.title for t in changed} == {"c", "b", "y"}


def test_move_into_done_sets_completion():
    source = _bucket("a")
    moving = source[0]
    reorderer.move_across_columns(moving, source, [], TaskStatus.done, 0, actor_id="u9")
    assert moving.completed_at is not None
    assert moving.completed_by == "u9"
    assert moving.position == 0


def test_move_to_same_column_is_a_reorder():
    bucket = _bucket("a", "b", "c")
    changed = reorderer.move_across_columns(bucket[2], bucket, bucket, TaskStatus.todo, 0)
    assert _titles(bucket) == ["c", "a", "b"]
    assert bucket[2] in changed


def test_move_rejects_negative_index():
    source = _bucket("a")
    with pytest.raises(ValidationError):
        reorderer.move_across_columns(source[0], source, [], TaskStatus.done, -1)
    assert source[0].status is TaskStatus.todo


def test_append_and_remove():
    bucket = _bucket("a", "b")
    new = Task(title="n", board_id="b1", created_by="u1")
    reorderer.append(bucket, new)
    assert new.position == 2

    reorderer.remove(bucket, bucket[0])
    assert _titles(bucket[1:]) == ["b"]
    assert bucket[1].position == 0


def test_positions_stay_dense_over_many_moves():
    columns = {
        TaskStatus.todo: _bucket("a", "b", "c", "d"),
        TaskStatus.in_progress: _bucket("e", "f", status=TaskStatus.in_progress),
        TaskStatus.done: [],
    }
    moves = [
        ("a", TaskStatus.in_progress, 0),
        ("e", TaskStatus.done, 0),
        ("c", TaskStatus.done, 5),
        ("f", TaskStatus.todo, 1),
        ("e", TaskStatus.done, 1),
        ("b", TaskStatus.in_progress, 3),
    ]
    for title, status, index in moves:
        task = next(t for col in columns.values() for t in col if t.title == title)
        source = columns[task.status]
        target = columns[status]
        reorderer.move_across_columns(task, source, target, status, index)
        if source is not target:
            source.remove(task)
            target.append(task)
        for column_status, column in columns.items():
            assert _dense(column)
            assert all(t.status is column_status for t in column)
