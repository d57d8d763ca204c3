from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request

from prisma_safety.api.observability.metrics import SCHEMA_CHECKS_TOTAL, SCHEMA_ISSUES_TOTAL
from prisma_safety.api.schemas.safety import (
    SafetyOptionsModel,
    SafetyReportModel,
    SchemaSafetyCheckRequest,
)
from prisma_safety.core.errors import SchemaSafetyError
from prisma_safety.core.safety.config import SafetyConfig, load_config
from prisma_safety.core.safety.gate import SafetyReport, check_git_refs, check_schema_texts

router = APIRouter(tags=["Schema Safety"])

WORKSPACE_ROOT = Path(os.getenv("PRISMA_SAFETY_WORKSPACE_ROOT") or "workspace")

_JOB_NAME_RE = re.compile(r"^[a-zA-Z0-9_\-]{1,128}$")


def _workspace_repo(job_name: str) -> Path:
    if not _JOB_NAME_RE.match(job_name):
        raise HTTPException(
            status_code=400,
            detail="Invalid job_name: must be alphanumeric, underscores, or hyphens, max 128 chars",
        )
    root = WORKSPACE_ROOT.resolve()
    candidate = (root / job_name).resolve()
    try:
        candidate.relative_to(root)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid job_name: must stay within the workspace root")
    return candidate


def _server_config() -> SafetyConfig:
    # Misconfigured server env is a 500, not the caller's fault.
    path = (os.getenv("PRISMA_SAFETY_CONFIG_FILE") or "").strip()
    return load_config(Path(path) if path else None)


def _with_options(cfg: SafetyConfig, options: Optional[SafetyOptionsModel]) -> SafetyConfig:
    if options is None:
        return cfg
    return cfg.with_overrides(field_identity=options.field_identity, disabled_rules=options.disabled_rules)


def _record(request: Request, source: str, report: SafetyReport) -> SafetyReportModel:
    outcome = "safe" if report.safe else "unsafe"
    request.state.safety_outcome = outcome
    request.state.issue_count = report.issue_count
    SCHEMA_CHECKS_TOTAL.labels(source=source, outcome=outcome).inc()
    for issue in report.issues:
        SCHEMA_ISSUES_TOTAL.labels(kind=issue.kind.value).inc()
    return SafetyReportModel(**report.as_dict())


@router.post("/schema-safety/check", response_model=SafetyReportModel)
def check_schema_safety(req: SchemaSafetyCheckRequest, request: Request):
    cfg = _server_config()
    try:
        report = check_schema_texts(req.previous_schema, req.current_schema, _with_options(cfg, req.options))
    except SchemaSafetyError as e:
        SCHEMA_CHECKS_TOTAL.labels(source="text", outcome="error").inc()
        raise HTTPException(status_code=400, detail=e.as_dict())
    return _record(request, "text", report)


@router.get("/repo/schema-safety", response_model=SafetyReportModel)
def repo_schema_safety(
    request: Request,
    job_name: str = Query(...),
    ref_a: str = Query(..., description="Base ref, e.g. main"),
    ref_b: str = Query("HEAD", description="Head ref"),
    schema_path: str = Query("prisma/schema.prisma"),
    merge_base: bool = Query(True),
    field_identity: Optional[str] = Query(None),
):
    repo_path = _workspace_repo(job_name)
    if not repo_path.exists():
        raise HTTPException(status_code=404, detail="workspace repo not found")

    cfg = _server_config()
    try:
        report = check_git_refs(
            repo_path,
            base_ref=ref_a,
            head_ref=ref_b,
            schema_path=schema_path,
            config=cfg.with_overrides(field_identity=field_identity),
            use_merge_base=merge_base,
        )
    except SchemaSafetyError as e:
        SCHEMA_CHECKS_TOTAL.labels(source="git", outcome="error").inc()
        raise HTTPException(status_code=400, detail=e.as_dict())
    return _record(request, "git", report)
