from __future__ import annotations

from typing import Callable, Dict, Optional

from prisma_safety.core.safety.models import (
    FieldRemoval,
    FieldTransition,
    IssueKind,
    ModelRemoval,
    SafetyIssue,
    Subject,
)


SafetyRule = Callable[[Subject], Optional[SafetyIssue]]


def rule_model_removed(subject: Subject) -> Optional[SafetyIssue]:
    if not isinstance(subject, ModelRemoval):
        return None
    model = subject.previous
    if model.ignored:
        return None
    return SafetyIssue(
        kind=IssueKind.MODEL_REMOVED,
        message=(
            f"Model {model.name!r} (table {model.physical_name!r}) was removed or renamed "
            f"without keeping its table mapping. Mark it with @@ignore before removing it, "
            f"or keep @@map(\"{model.physical_name}\") on the renamed model."
        ),
        model=model.name,
        table=model.physical_name,
    )


def rule_field_removed(subject: Subject) -> Optional[SafetyIssue]:
    if not isinstance(subject, FieldRemoval):
        return None
    field = subject.previous
    if field.ignored:
        return None
    model = subject.previous_model
    return SafetyIssue(
        kind=IssueKind.FIELD_REMOVED,
        message=(
            f"Field {model.name}.{field.name} (column {field.physical_name!r}) was removed or renamed "
            f"without keeping its column mapping. Mark it with @ignore before removing it, "
            f"or keep @map(\"{field.physical_name}\") on the renamed field."
        ),
        model=model.name,
        field=field.name,
        table=model.physical_name,
        column=field.physical_name,
    )


def rule_field_ignored_while_required(subject: Subject) -> Optional[SafetyIssue]:
    if not isinstance(subject, FieldTransition):
        return None
    before, after = subject.previous, subject.current
    # Only the false -> true flip of @ignore is checked.
    if before.ignored or not after.ignored:
        return None
    if not after.required:
        return None
    model = subject.current_model
    return SafetyIssue(
        kind=IssueKind.FIELD_IGNORED_WHILE_REQUIRED,
        message=(
            f"Field {model.name}.{after.name} (column {after.physical_name!r}) is newly marked @ignore "
            f"but is still required. Make it optional or give it a @default in the same change."
        ),
        model=model.name,
        field=after.name,
        table=model.physical_name,
        column=after.physical_name,
    )


# Evaluation order is the insertion order.
BUILTIN_RULES: Dict[str, SafetyRule] = {
    IssueKind.MODEL_REMOVED.value: rule_model_removed,
    IssueKind.FIELD_REMOVED.value: rule_field_removed,
    IssueKind.FIELD_IGNORED_WHILE_REQUIRED.value: rule_field_ignored_while_required,
}
