"""Dense per-column ordering for drag-and-drop.

A bucket is the list of tasks sharing one (board_id, status) pair. After every
operation here a bucket's positions are exactly 0..n-1 in display order. Each
operation returns the tasks whose position or status changed, so callers only
persist those.
"""

from typing import List, Optional

from taskboard.core.exceptions import ValidationError
from taskboard.domain.entities import Task, TaskStatus
from taskboard.domain.state_machine import TaskStateMachine


def _ordered(bucket: List[Task]) -> List[Task]:
    return sorted(bucket, key=lambda t: t.position)


def _without(bucket: List[Task], task: Task) -> List[Task]:
    return [t for t in bucket if t is not task and (task.id is None or t.id != task.id)]


def _check_target_index(index: int) -> None:
    if index < 0:
        raise ValidationError(f"Target index {index} cannot be negative", code="position.invalid_index")


class PositionReorderer:
    """Keeps each (board, status) bucket densely numbered."""

    @staticmethod
    def renumber(ordered_bucket: List[Task]) -> List[Task]:
        """Assign 0..n-1 following list order. Returns the tasks that moved."""
        changed = []
        for index, task in enumerate(ordered_bucket):
            if task.position != index:
                task.position = index
                changed.append(task)
        return changed

    @staticmethod
    def reorder_within_column(tasks: List[Task], from_index: int, to_index: int) -> List[Task]:
        """Move the task at ``from_index`` to ``to_index`` inside one bucket."""
        ordered = _ordered(tasks)
        if not 0 <= from_index < len(ordered):
            raise ValidationError(
                f"Source index {from_index} is outside the column (size {len(ordered)})",
                code="position.invalid_index",
            )
        _check_target_index(to_index)
        moving = ordered.pop(from_index)
        ordered.insert(min(to_index, len(ordered)), moving)
        return PositionReorderer.renumber(ordered)

    @staticmethod
    def move_across_columns(
        task: Task,
        source_bucket: List[Task],
        target_bucket: List[Task],
        target_status,
        target_index: int,
        actor_id: Optional[str] = None,
        now=None,
    ) -> List[Task]:
        """Take ``task`` out of its column, transition it and insert it into the target column.

        If ``target_status`` is the task's current status this is a plain
        reorder inside ``source_bucket``.
        """
        target_status = TaskStatus.from_str(target_status)
        _check_target_index(target_index)

        if task.status is target_status:
            ordered = _ordered(source_bucket)
            ids = [t.id for t in ordered]
            if task.id not in ids:
                ordered.append(task)
                ids.append(task.id)
            from_index = ids.index(task.id)
            ordered.pop(from_index)
            ordered.insert(min(target_index, len(ordered)), task)
            return PositionReorderer.renumber(ordered)

        changed = PositionReorderer.renumber(_ordered(_without(source_bucket, task)))

        TaskStateMachine.transition(task, target_status, actor_id=actor_id, now=now)

        target = _ordered(_without(target_bucket, task))
        target.insert(min(target_index, len(target)), task)
        changed.extend(t for t in PositionReorderer.renumber(target) if t is not task)
        changed.append(task)
        return changed

    @staticmethod
    def append(bucket: List[Task], task: Task) -> List[Task]:
        """Place ``task`` at the end of ``bucket``."""
        ordered = _ordered(_without(bucket, task))
        changed = PositionReorderer.renumber(ordered)
        task.position = len(ordered)
        return changed

    @staticmethod
    def remove(bucket: List[Task], task: Task) -> List[Task]:
        """Drop ``task`` from ``bucket`` and close the gap it leaves."""
        return PositionReorderer.renumber(_ordered(_without(bucket, task)))


reorderer = PositionReorderer()
