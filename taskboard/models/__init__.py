"""Models package: import all models so metadata.create_all can discover them."""

from taskboard.models.user import UserRecord
from taskboard.models.board import BoardRecord, BoardMember
from taskboard.models.task import TaskRecord

__all__ = ["UserRecord", "BoardRecord", "BoardMember", "TaskRecord"]
