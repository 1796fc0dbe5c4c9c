"""Task model."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, Index
from taskboard.db.base import Base
from taskboard.domain.entities import TaskStatus, TaskPriority


class TaskRecord(Base):
    """Task row. Tags are stored as a JSON list."""
    __tablename__ = "tasks"
    __table_args__ = (Index("ix_tasks_bucket", "board_id", "status", "position"),)

    id = Column(String(36), primary_key=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(Enum(TaskStatus), default=TaskStatus.todo, nullable=False, index=True)
    priority = Column(Enum(TaskPriority), default=TaskPriority.medium, nullable=False)
    board_id = Column(String(36), ForeignKey("boards.id", ondelete="CASCADE"), nullable=False)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    assigned_to = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    due_date = Column(DateTime, nullable=True)
    tags_json = Column(Text, nullable=True)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    completed_by = Column(String(36), ForeignKey("users.id"), nullable=True)
