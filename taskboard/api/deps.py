"""Per-request wiring of repositories into services."""

from fastapi import Depends
from sqlalchemy.orm import Session

from taskboard.db.session import get_db
from taskboard.repositories.sql import SqlBoardRepository, SqlTaskRepository, SqlUserRepository
from taskboard.services.board_service import BoardService
from taskboard.services.task_service import TaskService
from taskboard.services.user_service import UserService


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(SqlUserRepository(db))


def get_board_service(db: Session = Depends(get_db)) -> BoardService:
    return BoardService(SqlBoardRepository(db), SqlTaskRepository(db), SqlUserRepository(db))


def get_task_service(db: Session = Depends(get_db)) -> TaskService:
    return TaskService(SqlTaskRepository(db), SqlBoardRepository(db), SqlUserRepository(db))
