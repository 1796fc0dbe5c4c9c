"""
Task status state machine.

Any status may move to any other status. The only rules are the side effects
around Done:

  entering Done  -> completed_at = now, completed_by = actor
  leaving Done   -> completed_at / completed_by cleared
  otherwise      -> completed_at untouched

Done is a locked state, not a terminal one: a Done task accepts status changes
only, every other edit (and deletion) is rejected until it leaves Done.
"""
from datetime import datetime
from typing import Optional

from taskboard.domain.entities import Task, TaskStatus, utcnow


class TaskStateMachine:
    """Applies status transitions to tasks and guards the Done-lock."""

    @staticmethod
    def can_transition(current: TaskStatus, target: TaskStatus) -> bool:
        """All transitions between distinct states are allowed."""
        return TaskStatus.from_str(current) is not TaskStatus.from_str(target)

    @staticmethod
    def transition(
        task: Task,
        new_status,
        actor_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> bool:
        """Move ``task`` to ``new_status``. Returns False when it is already there."""
        new_status = TaskStatus.from_str(new_status)
        old_status = task.status
        if not TaskStateMachine.can_transition(old_status, new_status):
            return False

        task.status = new_status
        if new_status is TaskStatus.done:
            task.completed_at = now or utcnow()
            task.completed_by = actor_id
        elif old_status is TaskStatus.done:
            task.completed_at = None
            task.completed_by = None
        return True

    @staticmethod
    def ensure_editable(task: Task) -> None:
        task.ensure_not_completed("edit")

    @staticmethod
    def ensure_deletable(task: Task) -> None:
        task.ensure_not_completed("delete")


state_machine = TaskStateMachine()
