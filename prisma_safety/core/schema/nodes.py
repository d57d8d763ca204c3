from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Identifier:
    """Bare word inside an attribute argument, e.g. the enum value in @default(ACTIVE)."""

    name: str


@dataclass(frozen=True)
class FunctionCall:
    name: str
    arguments: Tuple["Argument", ...] = ()


@dataclass(frozen=True)
class ArrayValue:
    items: Tuple["Value", ...] = ()


Value = Union[str, int, float, bool, Identifier, FunctionCall, ArrayValue]


@dataclass(frozen=True)
class KeyValue:
    key: str
    value: Value


Argument = Union[Value, KeyValue]


@dataclass(frozen=True)
class AttributeNode:
    # kind: field (@name) | block (@@name)
    name: str
    kind: str
    arguments: Optional[Tuple[Argument, ...]] = ()
    line: int = 0


@dataclass(frozen=True)
class CommentNode:
    text: str
    doc: bool = False
    line: int = 0


@dataclass(frozen=True)
class FieldNode:
    name: str
    type_name: str
    optional: bool = False
    array: bool = False
    attributes: Tuple[AttributeNode, ...] = ()
    comment: Optional[str] = None
    line: int = 0


@dataclass(frozen=True)
class ModelBlock:
    # kind: model | view | type
    kind: str
    name: str
    fields: Tuple[FieldNode, ...] = ()
    attributes: Tuple[AttributeNode, ...] = ()
    comments: Tuple[CommentNode, ...] = ()
    line: int = 0


@dataclass(frozen=True)
class EnumValueNode:
    name: str
    attributes: Tuple[AttributeNode, ...] = ()
    line: int = 0


@dataclass(frozen=True)
class EnumBlock:
    name: str
    values: Tuple[EnumValueNode, ...] = ()
    attributes: Tuple[AttributeNode, ...] = ()
    comments: Tuple[CommentNode, ...] = ()
    line: int = 0
    kind: str = "enum"


@dataclass(frozen=True)
class Assignment:
    key: str
    value: Value


@dataclass(frozen=True)
class ConfigBlock:
    # kind: datasource | generator
    kind: str
    name: str
    assignments: Tuple[Assignment, ...] = ()
    line: int = 0

    def as_dict(self) -> Dict[str, Value]:
        return {a.key: a.value for a in self.assignments}


Block = Union[ModelBlock, EnumBlock, ConfigBlock]


@dataclass(frozen=True)
class Schema:
    blocks: Tuple[Block, ...] = ()
    comments: Tuple[CommentNode, ...] = ()

    @property
    def models(self) -> List[ModelBlock]:
        return [b for b in self.blocks if isinstance(b, ModelBlock) and b.kind == "model"]

    @property
    def enums(self) -> List[EnumBlock]:
        return [b for b in self.blocks if isinstance(b, EnumBlock)]

    def model_names(self) -> List[str]:
        return [m.name for m in self.models]
