from __future__ import annotations

from typing import Any, Dict, Optional


class SchemaSafetyError(ValueError):
    """
    Base error for every input/config problem the safety check can hit.

    Subclasses ValueError so API handlers can map it to a 400 the same way
    they map other validation failures.
    """

    code = "schema_safety.error"

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def as_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class SchemaParseError(SchemaSafetyError):
    code = "schema.parse_error"

    def __init__(self, message: str, *, line: int, column: int):
        super().__init__(f"{message} (line {line}, column {column})", details={"line": line, "column": column})
        self.line = line
        self.column = column


class MalformedSchemaError(SchemaSafetyError):
    code = "schema.malformed"


class AmbiguousIdentityError(SchemaSafetyError):
    code = "schema.ambiguous_identity"


class ConfigError(SchemaSafetyError):
    code = "config.invalid"


class SnapshotSourceError(SchemaSafetyError):
    code = "snapshot.unavailable"
