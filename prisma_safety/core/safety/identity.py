from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Set, Tuple

from prisma_safety.core.errors import MalformedSchemaError
from prisma_safety.core.safety.attributes import (
    DEFAULT,
    IGNORE,
    MAP,
    RELATION,
    has_attribute,
    read_attribute,
    read_string_argument,
)


@dataclass(frozen=True)
class FieldView:
    name: str
    physical_name: str
    type_name: str
    optional: bool = False
    array: bool = False
    has_default: bool = False
    ignored: bool = False
    relation: bool = False

    @property
    def required(self) -> bool:
        return not (self.optional or self.has_default)


@dataclass(frozen=True)
class ModelView:
    name: str
    physical_name: str
    ignored: bool = False
    fields: Tuple[FieldView, ...] = ()

    @property
    def column_fields(self) -> Tuple[FieldView, ...]:
        return tuple(f for f in self.fields if not f.relation)


def _declared_name(node: Any) -> str:
    name = getattr(node, "name", None)
    if not isinstance(name, str) or not name:
        raise MalformedSchemaError(f"{type(node).__name__} node has no declared name")
    return name


def effective_physical_name(node: Any) -> str:
    """
    Table name for a model (@@map), column name for a field (@map);
    the declared name when no mapping override is present.
    """
    declared = _declared_name(node)
    args = read_attribute(node, MAP)
    if args is None:
        return declared
    mapped = read_string_argument(args)
    if not mapped:
        raise MalformedSchemaError(
            f"Mapping override on {declared!r} has no string name argument",
            details={"node": declared, "attribute": MAP},
        )
    return mapped


def resolve_field(node: Any, model_names: Set[str]) -> FieldView:
    type_name = getattr(node, "type_name", None)
    if not isinstance(type_name, str):
        raise MalformedSchemaError(f"Field {_declared_name(node)!r} has no type")
    return FieldView(
        name=_declared_name(node),
        physical_name=effective_physical_name(node),
        type_name=type_name,
        optional=bool(getattr(node, "optional", False)),
        array=bool(getattr(node, "array", False)),
        has_default=has_attribute(node, DEFAULT),
        ignored=has_attribute(node, IGNORE),
        relation=has_attribute(node, RELATION) or type_name in model_names,
    )


def resolve_model(node: Any, model_names: Set[str]) -> ModelView:
    fields = getattr(node, "fields", None)
    if fields is None:
        raise MalformedSchemaError(f"Model {_declared_name(node)!r} has no field list")
    return ModelView(
        name=_declared_name(node),
        physical_name=effective_physical_name(node),
        ignored=has_attribute(node, IGNORE),
        fields=tuple(resolve_field(f, model_names) for f in fields),
    )


def _relation_targets(schema: Any) -> Optional[Set[str]]:
    blocks = getattr(schema, "blocks", None)
    if blocks is None:
        return None
    return {b.name for b in blocks if getattr(b, "kind", None) in ("model", "view")}


def resolve_snapshot(schema: Any) -> Tuple[ModelView, ...]:
    """
    Project a parsed schema (or any iterable of model nodes) into ModelViews,
    computing every effective name exactly once.
    """
    models: Iterable[Any] = schema.models if hasattr(schema, "models") else schema
    models = list(models)
    targets = _relation_targets(schema)
    if targets is None:
        targets = {_declared_name(m) for m in models}
    return tuple(resolve_model(m, targets) for m in models)
