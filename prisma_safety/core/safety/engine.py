from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, Iterator, List, Optional, Sequence

from prisma_safety.core.safety.config import SafetyConfig
from prisma_safety.core.safety.identity import ModelView, resolve_snapshot
from prisma_safety.core.safety.matcher import (
    FIELD_IDENTITY_PHYSICAL,
    check_column_identities,
    match_fields,
    match_models,
)
from prisma_safety.core.safety.models import (
    FieldRemoval,
    FieldTransition,
    ModelRemoval,
    SafetyIssue,
    Subject,
)
from prisma_safety.core.safety.rules import SafetyRule

log = logging.getLogger("prisma_safety.engine")


class IssueCollector:
    def __init__(self) -> None:
        self._issues: List[SafetyIssue] = []

    def add(self, issue: Optional[SafetyIssue]) -> None:
        if issue is not None:
            self._issues.append(issue)

    @property
    def issues(self) -> List[SafetyIssue]:
        return list(self._issues)

    def summary(self) -> Dict[str, int]:
        return dict(sorted(Counter(i.kind.value for i in self._issues).items()))


class SafetyRuleEngine:
    """
    Runs an ordered list of rules over every change between two snapshots.

    Subjects are produced in previous-snapshot order: each removed model,
    then for each matched model its removed fields and matched field pairs.
    Every enabled rule sees every subject; rules ignore subjects of other
    variants.
    """

    def __init__(self, rules: List[SafetyRule], *, field_identity: str = FIELD_IDENTITY_PHYSICAL):
        self._rules = rules
        self._field_identity = field_identity

    def subjects(self, previous: Sequence[ModelView], current: Sequence[ModelView]) -> Iterator[Subject]:
        check_column_identities(previous, "previous")
        check_column_identities(current, "current")
        models = match_models(previous, current)
        log.debug(
            "model match: matched=%d removed=%d added=%d",
            len(models.matched),
            len(models.unmatched_previous),
            len(models.unmatched_current),
        )
        unmatched = set(id(m) for m in models.unmatched_previous)
        pairs = {id(p): c for p, c in models.matched}

        for prev_model in previous:
            if id(prev_model) in unmatched:
                yield ModelRemoval(previous=prev_model)
                continue
            cur_model = pairs[id(prev_model)]
            fields = match_fields(prev_model, cur_model, self._field_identity)
            removed = set(id(f) for f in fields.unmatched_previous)
            field_pairs = {id(p): c for p, c in fields.matched}
            for prev_field in prev_model.column_fields:
                if id(prev_field) in removed:
                    yield FieldRemoval(previous_model=prev_model, current_model=cur_model, previous=prev_field)
                else:
                    yield FieldTransition(
                        previous_model=prev_model,
                        current_model=cur_model,
                        previous=prev_field,
                        current=field_pairs[id(prev_field)],
                    )

    def evaluate(self, previous: Sequence[ModelView], current: Sequence[ModelView]) -> List[SafetyIssue]:
        collector = IssueCollector()
        for subject in self.subjects(previous, current):
            for fn in self._rules:
                collector.add(fn(subject))
        issues = collector.issues
        if issues:
            log.info("schema safety: %d issue(s) %s", len(issues), collector.summary())
        else:
            log.info("schema safety: no issues")
        return issues

    @staticmethod
    def is_safe(issues: List[SafetyIssue]) -> bool:
        return not issues

    @classmethod
    def from_config(cls, config: SafetyConfig) -> "SafetyRuleEngine":
        return cls(config.enabled_rules(), field_identity=config.field_identity)


def list_safety_issues(previous: Any, current: Any, config: Optional[SafetyConfig] = None) -> List[SafetyIssue]:
    """
    Compare two parsed schemas and return every backward-incompatible change.
    An empty list means the transition is safe.
    """
    engine = SafetyRuleEngine.from_config(config or SafetyConfig())
    return engine.evaluate(resolve_snapshot(previous), resolve_snapshot(current))
