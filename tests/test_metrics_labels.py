from __future__ import annotations

from prisma_safety.api.main import app
from prisma_safety.api.observability.metrics import KNOWN_PATHS, UNMATCHED_PATH, normalize_path


def test_every_route_has_its_own_label():
    paths = {getattr(r, "path", None) for r in app.routes} - {None}
    assert paths <= KNOWN_PATHS


def test_known_paths_are_kept():
    assert normalize_path("/api/v1/schema-safety/check") == "/api/v1/schema-safety/check"
    assert normalize_path("/health/") == "/health"


def test_unknown_paths_share_one_label():
    assert normalize_path("/api/v1/does/not/exist/123") == UNMATCHED_PATH
    assert normalize_path("/wp-login.php") == UNMATCHED_PATH
    assert normalize_path("") == UNMATCHED_PATH


def test_unknown_path_requests_are_counted_under_one_label(client):
    client.get("/api/v1/nope/42")
    body = client.get("/metrics").text
    assert 'path="/:unmatched"' in body
    assert "/api/v1/nope/42" not in body
