"""FastAPI main application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from taskboard.core.config import settings
from taskboard.core.middleware import install_request_id_filter, setup_middleware
from taskboard.core.exceptions import (
    AuthenticationError, ConflictError, ForbiddenError, NotFoundError, TaskBoardError,
    ValidationError,
)
from taskboard.db.session import init_db

from taskboard.api.auth import router as auth_router
from taskboard.api.users import router as users_router
from taskboard.api.boards import router as boards_router
from taskboard.api.tasks import router as tasks_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s",
)
install_request_id_filter()
logger = logging.getLogger("taskboard")

ERROR_STATUS = {
    NotFoundError: 404,
    ForbiddenError: 403,
    ValidationError: 422,
    ConflictError: 409,
    AuthenticationError: 401,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting %s API", settings.APP_NAME)
    init_db()
    yield
    logger.info("Shutting down %s API", settings.APP_NAME)


app = FastAPI(
    title="Task Board API",
    description="Kanban boards with members, columns and drag-and-drop tasks",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

setup_middleware(app)


@app.exception_handler(TaskBoardError)
async def taskboard_exception_handler(request: Request, exc: TaskBoardError):
    status_code = 400
    for error_class, code in ERROR_STATUS.items():
        if isinstance(exc, error_class):
            status_code = code
            break
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code},
    )


app.include_router(auth_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(boards_router, prefix="/api")
app.include_router(tasks_router, prefix="/api")


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/api/health")
async def health():
    """Quick health check endpoint."""
    return {"status": "ok"}
