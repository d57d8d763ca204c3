from __future__ import annotations

import importlib.util
import json
from pathlib import Path

import pytest

TOOL = Path(__file__).resolve().parents[1] / "tools" / "check_schema_safety.py"


def _load_tool():
    spec = importlib.util.spec_from_file_location("check_schema_safety", TOOL)
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


cli = _load_tool()

PREV = 'model Foo {\n  qid String @id\n  bar String @map(name: "bar")\n}\n'
CUR = "model Foo {\n  qid String @id\n}\n"


@pytest.fixture()
def schema_files(tmp_path):
    prev = tmp_path / "prev.prisma"
    cur = tmp_path / "cur.prisma"
    prev.write_text(PREV, encoding="utf-8")
    cur.write_text(CUR, encoding="utf-8")
    return prev, cur


def test_safe_change_exits_zero(schema_files, capsys):
    prev, _ = schema_files
    rc = cli.main(["--previous", str(prev), "--current", str(prev)])
    assert rc == cli.EXIT_SAFE
    assert "OK" in capsys.readouterr().out


def test_unsafe_change_exits_one_with_text_report(schema_files, capsys):
    prev, cur = schema_files
    rc = cli.main(["--previous", str(prev), "--current", str(cur)])
    assert rc == cli.EXIT_UNSAFE
    out = capsys.readouterr().out
    assert "UNSAFE (1 issue)" in out
    assert "[field_removed] Foo.bar" in out


def test_json_report(schema_files, capsys):
    prev, cur = schema_files
    rc = cli.main(["--previous", str(prev), "--current", str(cur), "--format", "json"])
    assert rc == 1
    body = json.loads(capsys.readouterr().out)
    assert body["safe"] is False
    assert body["issue_count"] == 1
    assert body["summary"] == {"field_removed": 1}
    assert body["issues"][0]["column"] == "bar"


def test_disable_rule_flag(schema_files):
    prev, cur = schema_files
    assert cli.main(["--previous", str(prev), "--current", str(cur), "--disable-rule", "field_removed"]) == 0


def test_config_file_and_flag_are_combined(schema_files, tmp_path, capsys):
    prev, cur = schema_files
    cfg = tmp_path / "cfg.yml"
    cfg.write_text("disabled_rules: [model_removed]\n", encoding="utf-8")
    rc = cli.main(
        [
            "--previous", str(prev), "--current", str(cur),
            "--config", str(cfg), "--disable-rule", "field_removed", "--format", "json",
        ]
    )
    assert rc == 0
    body = json.loads(capsys.readouterr().out)
    assert body["config"]["disabled_rules"] == ["model_removed", "field_removed"]


def test_parse_error_exits_two(tmp_path, schema_files, capsys):
    prev, _ = schema_files
    broken = tmp_path / "broken.prisma"
    broken.write_text("model Foo {\n  qid\n}\n", encoding="utf-8")
    rc = cli.main(["--previous", str(prev), "--current", str(broken)])
    assert rc == cli.EXIT_ERROR
    assert "line 2" in capsys.readouterr().err


def test_missing_file_exits_two(tmp_path, schema_files, capsys):
    prev, _ = schema_files
    rc = cli.main(["--previous", str(prev), "--current", str(tmp_path / "missing.prisma"), "--format", "json"])
    assert rc == 2
    body = json.loads(capsys.readouterr().out)
    assert body["error"]["code"] == "schema_safety.error"


def test_mixing_sources_is_a_usage_error(schema_files):
    prev, cur = schema_files
    with pytest.raises(SystemExit) as exc:
        cli.main(["--previous", str(prev), "--current", str(cur), "--repo", "."])
    assert exc.value.code == 2
    with pytest.raises(SystemExit):
        cli.main(["--previous", str(prev)])


def test_git_mode(git_repo, commit_schema, capsys):
    commit_schema(git_repo, PREV, "v1")
    commit_schema(git_repo, CUR, "v2")
    rc = cli.main(
        ["--repo", str(git_repo), "--base", "HEAD~1", "--schema", "prisma/schema.prisma", "--format", "json"]
    )
    assert rc == 1
    body = json.loads(capsys.readouterr().out)
    assert body["refs"]["base"] == "HEAD~1"
    assert body["issues"][0]["kind"] == "field_removed"
