from __future__ import annotations

from prometheus_client import Counter, Histogram

# Every route this service serves. Anything else (404 scans, typos) is
# folded into one label so it cannot grow the label set.
KNOWN_PATHS = frozenset(
    {
        "/health",
        "/metrics",
        "/docs",
        "/docs/oauth2-redirect",
        "/redoc",
        "/openapi.json",
        "/api/v1/health/live",
        "/api/v1/health/ready",
        "/api/v1/schema-safety/check",
        "/api/v1/repo/schema-safety",
    }
)
UNMATCHED_PATH = "/:unmatched"


def normalize_path(path: str) -> str:
    """Metrics label for a request path."""
    p = (path or "/").rstrip("/") or "/"
    return p if p in KNOWN_PATHS else UNMATCHED_PATH


HTTP_REQUESTS_TOTAL = Counter(
    "prisma_safety_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "prisma_safety_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)

SCHEMA_CHECKS_TOTAL = Counter(
    "prisma_safety_checks_total",
    "Schema safety checks by outcome",
    ["source", "outcome"],
)

SCHEMA_ISSUES_TOTAL = Counter(
    "prisma_safety_issues_total",
    "Safety issues reported, by issue kind",
    ["kind"],
)
