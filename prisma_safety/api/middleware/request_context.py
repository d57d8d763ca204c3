from __future__ import annotations

import logging
import time
import uuid
from typing import Callable, Dict

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from prisma_safety.api.observability.metrics import (
    HTTP_REQUESTS_TOTAL,
    HTTP_REQUEST_DURATION_SECONDS,
    normalize_path,
)

log = logging.getLogger("prisma_safety.request")

REQUEST_ID_HEADER = "X-Request-Id"

SECURITY_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an id (taken from X-Request-Id or generated),
    records HTTP metrics, and writes one log line per /api/ request.

    Safety endpoints put `safety_outcome` / `issue_count` on request.state;
    they are added to the log line when present. Schema text never is.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = rid

        started = time.perf_counter()
        resp = await call_next(request)
        elapsed = time.perf_counter() - started

        resp.headers[REQUEST_ID_HEADER] = rid
        self._observe(request, resp, elapsed)
        return resp

    @staticmethod
    def _observe(request: Request, resp: Response, elapsed: float) -> None:
        path = normalize_path(request.url.path)
        method = request.method.upper()
        HTTP_REQUESTS_TOTAL.labels(method=method, path=path, status=str(resp.status_code)).inc()
        HTTP_REQUEST_DURATION_SECONDS.labels(method=method, path=path).observe(elapsed)

        if not request.url.path.startswith("/api/"):
            return
        fields = {
            "event": "request",
            "request_id": request.state.request_id,
            "method": method,
            "path": request.url.path,
            "status_code": resp.status_code,
            "duration_ms": int(elapsed * 1000),
        }
        for key in ("safety_outcome", "issue_count"):
            value = getattr(request.state, key, None)
            if value is not None:
                fields[key] = value
        log.info("%s", fields)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, enabled: bool = True):
        super().__init__(app)
        self.enabled = enabled

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        resp = await call_next(request)
        if self.enabled:
            for name, value in SECURITY_HEADERS.items():
                resp.headers.setdefault(name, value)
        return resp
