import os
import shutil
import subprocess
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from prisma_safety.api.main import app


@pytest.fixture(scope="session", autouse=True)
def _force_test_env():
    # Server-side config must not leak in from the developer's shell
    os.environ.pop("PRISMA_SAFETY_FIELD_IDENTITY", None)
    os.environ.pop("PRISMA_SAFETY_DISABLED_RULES", None)
    os.environ.pop("PRISMA_SAFETY_CONFIG_FILE", None)


@pytest.fixture()
def client():
    return TestClient(app)


def _git(repo: Path, *args: str) -> str:
    p = subprocess.run(["git", *args], cwd=str(repo), capture_output=True, text=True, check=True)
    return p.stdout.strip()


@pytest.fixture()
def git_repo(tmp_path: Path):
    """
    Empty git repo at <tmp_path>/repo with a committer identity configured.
    """
    if shutil.which("git") is None:
        pytest.skip("git not available in this environment")
    repo = tmp_path / "repo"
    repo.mkdir(parents=True, exist_ok=True)
    _git(repo, "init", "-q")
    _git(repo, "config", "user.email", "test@test.com")
    _git(repo, "config", "user.name", "Test")
    _git(repo, "config", "commit.gpgsign", "false")
    return repo


@pytest.fixture()
def git():
    return _git


@pytest.fixture()
def commit_schema():
    """
    commit_schema(repo, text, message, path="prisma/schema.prisma") -> commit sha
    """

    def _commit(repo: Path, text: str, message: str, path: str = "prisma/schema.prisma") -> str:
        target = repo / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
        _git(repo, "add", "-A")
        _git(repo, "commit", "-q", "-m", message)
        return _git(repo, "rev-parse", "HEAD")

    return _commit
