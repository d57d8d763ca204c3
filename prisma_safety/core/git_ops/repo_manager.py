# prisma_safety/core/git_ops/repo_manager.py

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Optional, Tuple

from prisma_safety.core.errors import SnapshotSourceError

log = logging.getLogger("prisma_safety.git")


# ---------------------------------------------------------------------
# Core git runner (deterministic, no pager, strict semantics)
# ---------------------------------------------------------------------

def _run_git(repo_path: Path, args: list[str]) -> Tuple[int, str, str]:
    log.debug("git %s (cwd=%s)", " ".join(args), repo_path)
    try:
        p = subprocess.run(
            ["git", "--no-pager", *args],
            cwd=str(repo_path),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            env={**os.environ, "GIT_PAGER": "cat", "PAGER": "cat"},
        )
    except FileNotFoundError as e:
        raise SnapshotSourceError("git executable not found") from e
    except NotADirectoryError as e:
        raise SnapshotSourceError(f"not a directory: {repo_path}") from e
    # stdout is not stripped: file contents must come back verbatim
    return p.returncode, p.stdout or "", (p.stderr or "").strip()


def get_ref(repo_path: Path, ref: str) -> str:
    rc, out, err = _run_git(repo_path, ["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"])
    if rc != 0:
        raise SnapshotSourceError(
            f"git ref {ref!r} does not resolve to a commit: {err or out.strip() or 'unknown ref'}",
            details={"ref": ref},
        )
    return out.strip()


# ---------------------------------------------------------------------
# Merge-base / ancestry
# ---------------------------------------------------------------------

def merge_base(repo_path: Path, left_ref: str, right_ref: str) -> Optional[str]:
    rc, out, err = _run_git(repo_path, ["merge-base", left_ref, right_ref])
    if rc != 0:
        return None
    return out.strip() or None


# ---------------------------------------------------------------------
# File contents at a ref
# ---------------------------------------------------------------------

def file_exists_at(repo_path: Path, ref: str, file_path: str) -> bool:
    rc, _, _ = _run_git(repo_path, ["cat-file", "-e", f"{ref}:{file_path}"])
    return rc == 0


def show_file(repo_path: Path, ref: str, file_path: str) -> str:
    rc, out, err = _run_git(repo_path, ["show", f"{ref}:{file_path}"])
    if rc != 0:
        raise SnapshotSourceError(
            f"git show {ref}:{file_path} failed: {err or 'unknown error'}",
            details={"ref": ref, "path": file_path},
        )
    return out
