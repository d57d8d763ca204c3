from __future__ import annotations

import logging
import traceback
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

log = logging.getLogger("prisma_safety.errors")


class SafeErrorMiddleware(BaseHTTPMiddleware):
    """
    Outermost wrapper. Unhandled errors become a bare 500 carrying only the
    request id; the traceback stays in the server log.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            rid = getattr(request.state, "request_id", None) or request.headers.get("x-request-id")
            log.error(
                "unhandled %s rid=%s path=%s: %s\n%s",
                type(e).__name__,
                rid,
                request.url.path,
                e,
                traceback.format_exc(),
            )
            payload = {"detail": "Internal Server Error"}
            if rid:
                payload["request_id"] = rid
            return JSONResponse(status_code=500, content=payload)
