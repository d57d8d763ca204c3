from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from prisma_safety.core.git_ops.snapshots import read_schema_at_ref, resolve_base_ref
from prisma_safety.core.safety.config import SafetyConfig
from prisma_safety.core.safety.engine import list_safety_issues
from prisma_safety.core.safety.models import SafetyIssue
from prisma_safety.core.schema.nodes import Schema
from prisma_safety.core.schema.parser import parse_schema


@dataclass
class SafetyReport:
    issues: List[SafetyIssue]
    config: SafetyConfig
    refs: Dict[str, str] = field(default_factory=dict)

    @property
    def safe(self) -> bool:
        return not self.issues

    @property
    def issue_count(self) -> int:
        return len(self.issues)

    def summary(self) -> Dict[str, int]:
        return dict(sorted(Counter(i.kind.value for i in self.issues).items()))

    def as_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "safe": self.safe,
            "issue_count": self.issue_count,
            "summary": self.summary(),
            "issues": [i.as_dict() for i in self.issues],
            "config": self.config.as_dict(),
        }
        if self.refs:
            out["refs"] = dict(self.refs)
        return out


def check_schemas(previous: Schema, current: Schema, config: Optional[SafetyConfig] = None) -> SafetyReport:
    cfg = config or SafetyConfig()
    return SafetyReport(issues=list_safety_issues(previous, current, cfg), config=cfg)


def check_schema_texts(previous_text: str, current_text: str, config: Optional[SafetyConfig] = None) -> SafetyReport:
    return check_schemas(parse_schema(previous_text), parse_schema(current_text), config)


def check_git_refs(
    repo_path: Path,
    *,
    base_ref: str,
    head_ref: str = "HEAD",
    schema_path: str,
    config: Optional[SafetyConfig] = None,
    use_merge_base: bool = True,
) -> SafetyReport:
    """
    Compare `schema_path` at the base of a change against the head.
    With `use_merge_base`, the base is the fork point of head from base_ref.
    """
    repo_path = Path(repo_path)
    compare_ref = resolve_base_ref(repo_path, base_ref, head_ref) if use_merge_base else base_ref
    previous_text = read_schema_at_ref(repo_path, compare_ref, schema_path)
    current_text = read_schema_at_ref(repo_path, head_ref, schema_path)
    report = check_schema_texts(previous_text, current_text, config)
    report.refs = {"base": base_ref, "compared": compare_ref, "head": head_ref, "schema_path": schema_path}
    return report
