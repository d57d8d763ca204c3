from __future__ import annotations

import shutil

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import JSONResponse

from prisma_safety import __version__

router = APIRouter()


@router.get("/health")
def health_check():
    return {"status": "healthy", "version": __version__}


@router.get("/api/v1/health/live")
def liveness():
    return {"status": "alive"}


@router.get("/api/v1/health/ready")
def readiness():
    """
    Ready when git is on PATH; repo-backed checks cannot run without it.
    """
    problems: list[str] = []
    if shutil.which("git") is None:
        problems.append("git_not_found")

    if problems:
        return JSONResponse(status_code=503, content={"status": "not_ready", "problems": problems})
    return {"status": "ready"}


@router.get("/metrics", include_in_schema=False)
def prometheus_metrics() -> Response:
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
