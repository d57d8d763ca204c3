from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import yaml

from prisma_safety.core.errors import ConfigError
from prisma_safety.core.safety.matcher import FIELD_IDENTITIES, FIELD_IDENTITY_PHYSICAL
from prisma_safety.core.safety.rules import BUILTIN_RULES, SafetyRule


ENV_FIELD_IDENTITY = "PRISMA_SAFETY_FIELD_IDENTITY"
ENV_DISABLED_RULES = "PRISMA_SAFETY_DISABLED_RULES"


@dataclass(frozen=True)
class SafetyConfig:
    # physical: fields pair by @map column; declared: fields pair by declared name
    field_identity: str = FIELD_IDENTITY_PHYSICAL
    disabled_rules: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.field_identity not in FIELD_IDENTITIES:
            raise ConfigError(
                f"Unknown field identity {self.field_identity!r}; expected one of {', '.join(FIELD_IDENTITIES)}"
            )
        unknown = sorted(set(self.disabled_rules) - set(BUILTIN_RULES))
        if unknown:
            raise ConfigError(
                f"Unknown rule(s): {', '.join(unknown)}; known rules: {', '.join(BUILTIN_RULES)}",
                details={"unknown_rules": unknown},
            )

    def enabled_rules(self) -> List[SafetyRule]:
        return [fn for name, fn in BUILTIN_RULES.items() if name not in self.disabled_rules]

    def with_overrides(
        self,
        *,
        field_identity: Optional[str] = None,
        disabled_rules: Optional[Iterable[str]] = None,
    ) -> "SafetyConfig":
        changes: Dict[str, Any] = {}
        if field_identity:
            changes["field_identity"] = field_identity
        if disabled_rules is not None:
            changes["disabled_rules"] = _normalize_rules(disabled_rules)
        return replace(self, **changes) if changes else self

    def as_dict(self) -> Dict[str, Any]:
        return {"field_identity": self.field_identity, "disabled_rules": list(self.disabled_rules)}


def _normalize_rules(names: Iterable[str]) -> Tuple[str, ...]:
    out: List[str] = []
    for n in names:
        n = str(n).strip()
        if n and n not in out:
            out.append(n)
    return tuple(out)


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file {path} is not valid YAML: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_config(path: Optional[Path] = None, *, env: Optional[Mapping[str, str]] = None) -> SafetyConfig:
    """
    Resolve configuration. Precedence (lowest first):
      defaults -> YAML file -> PRISMA_SAFETY_* environment variables
    Explicit CLI/API options are applied afterwards with `with_overrides`.
    """
    env = os.environ if env is None else env
    cfg = SafetyConfig()

    if path is not None:
        data = _read_yaml(Path(path))
        rules = data.get("disabled_rules")
        if rules is not None and not isinstance(rules, list):
            raise ConfigError("disabled_rules must be a list of rule names")
        cfg = cfg.with_overrides(
            field_identity=(str(data["field_identity"]).strip().lower() if data.get("field_identity") else None),
            disabled_rules=rules,
        )

    env_identity = (env.get(ENV_FIELD_IDENTITY) or "").strip().lower()
    env_rules = (env.get(ENV_DISABLED_RULES) or "").strip()
    cfg = cfg.with_overrides(
        field_identity=env_identity or None,
        disabled_rules=env_rules.split(",") if env_rules else None,
    )
    return cfg
