from __future__ import annotations

from prisma_safety import main as server
from prisma_safety.api.main import app


def test_run_passes_app_object_by_default(monkeypatch):
    calls = {}
    monkeypatch.setattr(server.uvicorn, "run", lambda target, **kw: calls.update(target=target, **kw))
    monkeypatch.setenv("PRISMA_SAFETY_PORT", "9100")
    monkeypatch.delenv("PRISMA_SAFETY_RELOAD", raising=False)
    server.run()
    assert calls["target"] is app
    assert calls["port"] == 9100
    assert calls["reload"] is False


def test_run_with_reload_uses_import_string(monkeypatch):
    calls = {}
    monkeypatch.setattr(server.uvicorn, "run", lambda target, **kw: calls.update(target=target, **kw))
    monkeypatch.setenv("PRISMA_SAFETY_RELOAD", "true")
    server.run()
    assert calls["target"] == "prisma_safety.api.main:app"
    assert calls["reload"] is True
