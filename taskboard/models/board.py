"""Board and BoardMember models."""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from taskboard.db.base import Base


class BoardRecord(Base):
    """Kanban board row. Membership lives in ``board_members``."""
    __tablename__ = "boards"

    id = Column(String(36), primary_key=True)
    name = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=True)
    color = Column(String(7), nullable=False, default="#3498db")
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    members = relationship(
        "BoardMember",
        back_populates="board",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="BoardMember.id",
    )


class BoardMember(Base):
    """Association between users and boards."""
    __tablename__ = "board_members"
    __table_args__ = (UniqueConstraint("board_id", "user_id", name="uq_board_member"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    board_id = Column(String(36), ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    board = relationship("BoardRecord", back_populates="members")
