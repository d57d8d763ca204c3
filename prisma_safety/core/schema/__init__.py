from .nodes import (
    ArrayValue,
    AttributeNode,
    CommentNode,
    ConfigBlock,
    EnumBlock,
    FieldNode,
    FunctionCall,
    Identifier,
    KeyValue,
    ModelBlock,
    Schema,
)
from .parser import parse_schema

__all__ = [
    "ArrayValue",
    "AttributeNode",
    "CommentNode",
    "ConfigBlock",
    "EnumBlock",
    "FieldNode",
    "FunctionCall",
    "Identifier",
    "KeyValue",
    "ModelBlock",
    "Schema",
    "parse_schema",
]
