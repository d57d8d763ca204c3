from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from prisma_safety.core.safety.identity import FieldView, ModelView


class IssueKind(str, Enum):
    MODEL_REMOVED = "model_removed"
    FIELD_REMOVED = "field_removed"
    FIELD_IGNORED_WHILE_REQUIRED = "field_ignored_while_required"


@dataclass(frozen=True)
class SafetyIssue:
    kind: IssueKind
    message: str
    model: str
    field: Optional[str] = None
    table: Optional[str] = None
    column: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "model": self.model,
            "field": self.field,
            "table": self.table,
            "column": self.column,
        }


# ---------------------------------------------------------------------
# Rule subjects: one variant per kind of change the rules can look at
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class ModelRemoval:
    previous: ModelView


@dataclass(frozen=True)
class FieldRemoval:
    previous_model: ModelView
    current_model: ModelView
    previous: FieldView


@dataclass(frozen=True)
class FieldTransition:
    previous_model: ModelView
    current_model: ModelView
    previous: FieldView
    current: FieldView


Subject = Union[ModelRemoval, FieldRemoval, FieldTransition]
