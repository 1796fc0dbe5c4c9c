"""Per-request context for logging, plus CORS.

Every request gets an id (the caller's ``X-Request-Id`` or a fresh one). It is
bound to ``request_id_var`` while the request is served, so service log lines
such as "Task ... moved" carry the id of the HTTP call that caused them.
"""

import contextvars
import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from taskboard.core.config import settings

logger = logging.getLogger("taskboard")

REQUEST_ID_HEADER = "X-Request-Id"

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")


class RequestIdFilter(logging.Filter):
    """Adds ``record.request_id`` so formats can use ``%(request_id)s``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def install_request_id_filter(root: logging.Logger = None) -> None:
    """Attach the filter to every handler of the root logger."""
    for handler in (root or logging.getLogger()).handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds the request id, echoes it back and logs one access line per request."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            response.headers[REQUEST_ID_HEADER] = request_id
            response.headers["X-Response-Time-Ms"] = f"{elapsed_ms:.2f}"
            logger.info("%s %s -> %d (%.1fms)", request.method, request.url.path,
                        response.status_code, elapsed_ms)
            return response
        finally:
            request_id_var.reset(token)


def setup_middleware(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(RequestContextMiddleware)
