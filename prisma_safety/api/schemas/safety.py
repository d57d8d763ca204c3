from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


FieldIdentity = Literal["physical", "declared"]


class SafetyOptionsModel(BaseModel):
    field_identity: Optional[FieldIdentity] = Field(
        default=None, description="How fields are paired across versions. Defaults to server config."
    )
    disabled_rules: Optional[List[str]] = Field(default=None, description="Rules to skip for this check.")


class SchemaSafetyCheckRequest(BaseModel):
    previous_schema: str = Field(..., description="Schema text of the deployed version.")
    current_schema: str = Field(..., description="Schema text of the proposed version.")
    options: SafetyOptionsModel = Field(default_factory=SafetyOptionsModel)


class SafetyIssueModel(BaseModel):
    kind: str
    message: str
    model: str
    field: Optional[str] = None
    table: Optional[str] = None
    column: Optional[str] = None


class SafetyConfigModel(BaseModel):
    field_identity: FieldIdentity
    disabled_rules: List[str] = Field(default_factory=list)


class SafetyReportModel(BaseModel):
    safe: bool
    issue_count: int
    summary: Dict[str, int] = Field(default_factory=dict)
    issues: List[SafetyIssueModel] = Field(default_factory=list)
    config: SafetyConfigModel
    refs: Optional[Dict[str, str]] = None
