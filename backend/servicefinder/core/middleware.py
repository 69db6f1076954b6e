"""Middleware: request ID injection, structured access logging."""

import hashlib
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("servicefinder.access")

SEARCH_PATH = "/providers/search"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID, echoed back as X-Request-ID."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """One key=value line per request.

    Search requests also carry the query length, whether a location filter
    was given, and how many providers were returned. Query text itself is
    never logged.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        elapsed_ms = round((time.monotonic() - start) * 1000, 1)

        fields = [
            ("request_id", getattr(request.state, "request_id", "-")),
            ("user", _hashed_user(request)),
            ("ip", request.client.host if request.client else "-"),
            ("method", request.method),
            ("path", request.url.path),
            ("status", response.status_code),
            ("elapsed_ms", f"{elapsed_ms:.1f}"),
        ]
        if request.url.path == SEARCH_PATH:
            fields.extend(search_fields(request))

        logger.info(" ".join(f"{key}={value}" for key, value in fields))
        return response


def search_fields(request: Request) -> list[tuple[str, object]]:
    params = request.query_params
    return [
        ("q_len", len(params.get("q", ""))),
        ("location_set", bool(params.get("location", "").strip())),
        ("results", getattr(request.state, "result_count", "-")),
    ]


def _hashed_user(request: Request) -> str:
    user_id = getattr(request.state, "user_id", None)
    return hash_user_id(user_id) if user_id else "-"


def hash_user_id(uid: str) -> str:
    """First 12 chars of SHA-256, so logs never carry raw user ids."""
    return hashlib.sha256(str(uid).encode()).hexdigest()[:12]
