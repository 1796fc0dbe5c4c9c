"""Seed sample users, a board and a few tasks for demo purposes."""

import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from taskboard.domain.entities import TaskStatus, utcnow
from taskboard.repositories.sql import SqlBoardRepository, SqlTaskRepository, SqlUserRepository
from taskboard.services.board_service import BoardService
from taskboard.services.task_service import TaskService
from taskboard.services.user_service import UserService

logger = logging.getLogger("taskboard")

SAMPLE_PASSWORD = "Demo1234"

SAMPLE_USERS = [
    ("alice", "alice@example.com", "Alice Anders"),
    ("bob", "bob@example.com", "Bob Brown"),
    ("carol", "carol@example.com", "Carol Chen"),
]

SAMPLE_TASKS = [
    ("Write project brief", "high", None, TaskStatus.done),
    ("Design board layout", "medium", "bob", TaskStatus.in_progress),
    ("Set up CI", "low", "carol", TaskStatus.todo),
    ("Review API contract", "critical", "bob", TaskStatus.in_review),
]


def seed_sample_data(db: Session) -> dict:
    """Insert demo users, one shared board and its tasks. Safe to re-run."""
    users_repo = SqlUserRepository(db)
    users = UserService(users_repo)
    boards = BoardService(SqlBoardRepository(db), SqlTaskRepository(db), users_repo)
    tasks = TaskService(SqlTaskRepository(db), SqlBoardRepository(db), users_repo)

    ids = {}
    for username, email, full_name in SAMPLE_USERS:
        existing = users_repo.get_by_username(username)
        if existing:
            ids[username] = existing.id
            continue
        ids[username] = users.register(username, email, SAMPLE_PASSWORD, full_name).id

    owner = ids["alice"]
    if any(b.name == "Demo Board" for b in boards.list_accessible(owner)):
        logger.info("Sample data already present, skipping")
        return ids

    board = boards.create("Demo Board", owner, "A board to try things out")
    for username in ("bob", "carol"):
        boards.add_member(board.id, ids[username], owner)

    for title, priority, assignee, status in SAMPLE_TASKS:
        task = tasks.create(
            title, board.id, owner,
            priority=priority,
            assigned_to=ids[assignee] if assignee else None,
            due_date=utcnow() + timedelta(days=7),
            tags=["demo"],
        )
        if status is not TaskStatus.todo:
            tasks.change_status(task.id, status, owner)

    logger.info("Seeded %d users and board %s", len(ids), board.id)
    return ids
