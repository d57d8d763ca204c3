from __future__ import annotations

import pytest

from prisma_safety.core.errors import ConfigError
from prisma_safety.core.safety.config import SafetyConfig, load_config
from prisma_safety.core.safety.rules import BUILTIN_RULES


def test_defaults():
    cfg = load_config(env={})
    assert cfg == SafetyConfig()
    assert cfg.field_identity == "physical"
    assert cfg.enabled_rules() == list(BUILTIN_RULES.values())


def test_yaml_file(tmp_path):
    p = tmp_path / "prisma-safety.yml"
    p.write_text("field_identity: declared\ndisabled_rules:\n  - model_removed\n", encoding="utf-8")
    cfg = load_config(p, env={})
    assert cfg.field_identity == "declared"
    assert cfg.disabled_rules == ("model_removed",)
    assert BUILTIN_RULES["model_removed"] not in cfg.enabled_rules()


def test_empty_yaml_file_means_defaults(tmp_path):
    p = tmp_path / "empty.yml"
    p.write_text("", encoding="utf-8")
    assert load_config(p, env={}) == SafetyConfig()


def test_env_overrides_file(tmp_path):
    p = tmp_path / "cfg.yml"
    p.write_text("field_identity: declared\n", encoding="utf-8")
    cfg = load_config(
        p,
        env={"PRISMA_SAFETY_FIELD_IDENTITY": "Physical", "PRISMA_SAFETY_DISABLED_RULES": "field_removed, model_removed"},
    )
    assert cfg.field_identity == "physical"
    assert cfg.disabled_rules == ("field_removed", "model_removed")


def test_with_overrides_keeps_unset_values():
    cfg = SafetyConfig(field_identity="declared", disabled_rules=("field_removed",))
    assert cfg.with_overrides() is cfg
    assert cfg.with_overrides(disabled_rules=[]).disabled_rules == ()
    assert cfg.with_overrides(field_identity="physical").disabled_rules == ("field_removed",)


@pytest.mark.parametrize(
    "content, message",
    [
        ("field_identity: fuzzy\n", "Unknown field identity"),
        ("disabled_rules: [no_such_rule]\n", "Unknown rule"),
        ("disabled_rules: field_removed\n", "must be a list"),
        ("- just\n- a list\n", "must contain a mapping"),
        ("field_identity: [unclosed\n", "not valid YAML"),
    ],
)
def test_invalid_config_files(tmp_path, content, message):
    p = tmp_path / "bad.yml"
    p.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError, match=message):
        load_config(p, env={})


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigError, match="Cannot read config file"):
        load_config(tmp_path / "nope.yml", env={})


def test_field_identity_is_case_insensitive_in_file_and_env(tmp_path):
    p = tmp_path / "cfg.yml"
    p.write_text("field_identity: Declared\n", encoding="utf-8")
    assert load_config(p, env={}).field_identity == "declared"
    assert load_config(env={"PRISMA_SAFETY_FIELD_IDENTITY": "DECLARED"}).field_identity == "declared"
