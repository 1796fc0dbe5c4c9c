"""Shared fixtures: in-memory services, a SQLite session, and an API client."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from taskboard.db.session import init_db
from taskboard.repositories.memory import (
    InMemoryBoardRepository, InMemoryTaskRepository, InMemoryUserRepository,
)
from taskboard.services.board_service import BoardService
from taskboard.services.task_service import TaskService
from taskboard.services.user_service import UserService

PASSWORD = "Secret123"


@pytest.fixture
def users_repo():
    return InMemoryUserRepository()


@pytest.fixture
def boards_repo(tasks_repo):
    return InMemoryBoardRepository(tasks_repo)


@pytest.fixture
def tasks_repo():
    return InMemoryTaskRepository()


@pytest.fixture
def user_service(users_repo):
    return UserService(users_repo)


@pytest.fixture
def board_service(boards_repo, tasks_repo, users_repo):
    return BoardService(boards_repo, tasks_repo, users_repo)


@pytest.fixture
def task_service(tasks_repo, boards_repo, users_repo):
    return TaskService(tasks_repo, boards_repo, users_repo)


@pytest.fixture
def make_user(user_service):
    """Register users by name: ``make_user("u1")``."""
    def _make(username, full_name=None):
        return user_service.register(
            username, f"{username}@example.com", PASSWORD, full_name or username.title()
        )
    return _make


@pytest.fixture
def u1(make_user):
    return make_user("u1_owner")


@pytest.fixture
def u2(make_user):
    return make_user("u2_member")


@pytest.fixture
def u3(make_user):
    return make_user("u3_outsider")


@pytest.fixture
def board(board_service, u1, u2):
    """'Sprint 1' owned by u1 with u2 as member."""
    created = board_service.create("Sprint 1", u1.id)
    return board_service.add_member(created.id, u2.id, u1.id)


# ---- SQL ----

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


# ---- HTTP ----

@pytest.fixture
def client(session_factory):
    from fastapi.testclient import TestClient

    from taskboard.db.session import get_db
    from taskboard.main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
