from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prisma_safety import __version__
from prisma_safety.api.endpoints import health, schema_safety
from prisma_safety.api.middleware.error_shaping import SafeErrorMiddleware
from prisma_safety.api.middleware.request_context import (
    RequestContextMiddleware,
    SecurityHeadersMiddleware,
)

app = FastAPI(
    title="Prisma Schema Safety API",
    version=__version__,
)

# ------------------------------------------------------------
# Middleware stack (ORDER MATTERS)
# Starlette reverses add_middleware order: the LAST call = OUTERMOST wrapper.
# Runtime order (outermost -> innermost):
#   SafeErrorMiddleware -> CORSMiddleware -> SecurityHeaders -> RequestContext -> handler
# ------------------------------------------------------------

env = (os.getenv("PRISMA_SAFETY_ENV") or "dev").strip().lower()

app.add_middleware(RequestContextMiddleware)

sec_enabled = (
    os.getenv("PRISMA_SAFETY_SECURITY_HEADERS_ENABLED") or ("true" if env == "prod" else "false")
).strip().lower() in ("1", "true", "yes")
app.add_middleware(SecurityHeadersMiddleware, enabled=sec_enabled)

_cors_origins_raw = os.getenv("PRISMA_SAFETY_CORS_ORIGINS", "").strip()
_cors_origins = [o.strip() for o in _cors_origins_raw.split(",") if o.strip()] if _cors_origins_raw else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.add_middleware(SafeErrorMiddleware)


app.include_router(health.router)
app.include_router(schema_safety.router, prefix="/api/v1")
