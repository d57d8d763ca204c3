from __future__ import annotations

import logging
from pathlib import Path

from prisma_safety.core.errors import SnapshotSourceError
from prisma_safety.core.git_ops.repo_manager import file_exists_at, get_ref, merge_base, show_file

log = logging.getLogger("prisma_safety.git")


def _require_repo(repo_path: Path) -> None:
    if not Path(repo_path).is_dir():
        raise SnapshotSourceError(f"repository path does not exist: {repo_path}", details={"repo": str(repo_path)})


def read_schema_at_ref(repo_path: Path, ref: str, schema_path: str) -> str:
    """
    Schema text of `schema_path` as committed at `ref`.

    The ref must resolve; a schema file that does not exist at that ref
    yields "" (an empty schema, e.g. before the schema was introduced).
    """
    _require_repo(repo_path)
    commit = get_ref(repo_path, ref)
    if not file_exists_at(repo_path, commit, schema_path):
        log.info("schema %s not present at %s (%s); using empty schema", schema_path, ref, commit[:12])
        return ""
    return show_file(repo_path, commit, schema_path)


def resolve_base_ref(repo_path: Path, base_ref: str, head_ref: str = "HEAD") -> str:
    """
    Commit to compare `head_ref` against: the merge-base of both refs, so
    changes that landed on the base branch after the fork are not blamed on
    the head. Falls back to `base_ref` itself when histories are unrelated.
    """
    _require_repo(repo_path)
    get_ref(repo_path, base_ref)
    get_ref(repo_path, head_ref)
    mb = merge_base(repo_path, base_ref, head_ref)
    if mb is None:
        log.warning("no merge-base between %s and %s; comparing against %s directly", base_ref, head_ref, base_ref)
        return base_ref
    return mb
