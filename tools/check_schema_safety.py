"""Pre-merge gate: fail when a Prisma schema change would break the deployed database."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

# ---- sys.path bootstrap (Windows-friendly) ----
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))
# ---------------------------------------------

from prisma_safety.core.errors import SchemaSafetyError  # noqa: E402
from prisma_safety.core.safety.config import load_config  # noqa: E402
from prisma_safety.core.safety.gate import SafetyReport, check_git_refs, check_schema_texts  # noqa: E402
from prisma_safety.core.safety.matcher import FIELD_IDENTITIES  # noqa: E402

EXIT_SAFE = 0
EXIT_UNSAFE = 1
EXIT_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description=__doc__)
    files = ap.add_argument_group("compare two files")
    files.add_argument("--previous", type=Path, help="Schema file of the deployed version")
    files.add_argument("--current", type=Path, help="Schema file of the proposed version")

    git = ap.add_argument_group("compare two git refs")
    git.add_argument("--repo", type=Path, help="Path of the git repository")
    git.add_argument("--base", help="Base ref (target branch), e.g. origin/main")
    git.add_argument("--head", default="HEAD", help="Head ref (default HEAD)")
    git.add_argument("--schema", help="Schema path inside the repository, e.g. prisma/schema.prisma")
    git.add_argument("--no-merge-base", action="store_true", help="Compare against --base itself, not the merge-base")

    ap.add_argument("--config", type=Path, help="YAML config file")
    ap.add_argument("--field-identity", choices=FIELD_IDENTITIES, help="How fields are paired across versions")
    ap.add_argument("--disable-rule", action="append", default=None, metavar="NAME", help="Skip a rule (repeatable)")
    ap.add_argument("--format", choices=("text", "json"), default="text")
    ap.add_argument("--verbose", "-v", action="store_true")
    return ap


def _render_text(report: SafetyReport) -> str:
    if report.safe:
        return "schema safety: OK (no backward-incompatible changes)"
    lines = [f"schema safety: UNSAFE ({report.issue_count} issue{'s' if report.issue_count != 1 else ''})"]
    for issue in report.issues:
        target = f"{issue.model}.{issue.field}" if issue.field else issue.model
        lines.append(f"  - [{issue.kind.value}] {target}: {issue.message}")
    return "\n".join(lines)


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise SchemaSafetyError(f"Cannot read schema file {path}: {e}") from e


def main(argv: Optional[List[str]] = None) -> int:
    ap = _build_parser()
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    use_files = args.previous is not None or args.current is not None
    use_git = args.repo is not None or args.base is not None or args.schema is not None
    if use_files == use_git:
        ap.error("use either --previous/--current or --repo/--base/--schema")
    if use_files and (args.previous is None or args.current is None):
        ap.error("--previous and --current are both required")
    if use_git and (args.repo is None or args.base is None or args.schema is None):
        ap.error("--repo, --base and --schema are all required")

    try:
        cfg = load_config(args.config)
        cfg = cfg.with_overrides(
            field_identity=args.field_identity,
            disabled_rules=(list(cfg.disabled_rules) + args.disable_rule) if args.disable_rule else None,
        )
        if use_files:
            report = check_schema_texts(_read(args.previous), _read(args.current), cfg)
        else:
            report = check_git_refs(
                args.repo,
                base_ref=args.base,
                head_ref=args.head,
                schema_path=args.schema,
                config=cfg,
                use_merge_base=not args.no_merge_base,
            )
    except SchemaSafetyError as e:
        if args.format == "json":
            print(json.dumps({"error": e.as_dict()}, indent=2, sort_keys=True))
        else:
            print(f"schema safety: ERROR {e}", file=sys.stderr)
        return EXIT_ERROR

    if args.format == "json":
        print(json.dumps(report.as_dict(), indent=2, sort_keys=True))
    else:
        print(_render_text(report))
    return EXIT_SAFE if report.safe else EXIT_UNSAFE


if __name__ == "__main__":
    raise SystemExit(main())
