from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple

from prisma_safety.core.errors import MalformedSchemaError
from prisma_safety.core.schema.nodes import Argument, KeyValue


# Attribute names as written after "@" / "@@"
MAP = "map"
IGNORE = "ignore"
DEFAULT = "default"
RELATION = "relation"


def _describe(node: Any) -> str:
    name = getattr(node, "name", None)
    kind = getattr(node, "kind", None) or type(node).__name__
    return f"{kind} {name!r}" if name else str(kind)


def _attributes_of(node: Any) -> Sequence[Any]:
    attrs = getattr(node, "attributes", None)
    if attrs is None or isinstance(attrs, (str, bytes)):
        raise MalformedSchemaError(
            f"{_describe(node)} has no attribute list",
            details={"node": _describe(node)},
        )
    return attrs


def read_attribute(node: Any, name: str) -> Optional[Tuple[Argument, ...]]:
    """
    Return the arguments of attribute `name` on `node`, or None when absent.

    An attribute written without parentheses (e.g. @ignore) yields an empty
    tuple. Raises MalformedSchemaError when the node has no attribute list or
    the attribute has no argument list at all.
    """
    for attr in _attributes_of(node):
        if getattr(attr, "name", None) != name:
            continue
        args = getattr(attr, "arguments", None)
        if args is None:
            raise MalformedSchemaError(
                f"Attribute {name!r} on {_describe(node)} has no argument list",
                details={"node": _describe(node), "attribute": name},
            )
        return tuple(args)
    return None


def has_attribute(node: Any, name: str) -> bool:
    return read_attribute(node, name) is not None


def read_string_argument(arguments: Sequence[Argument], key: str = "name") -> Optional[str]:
    """
    Accepts both @map("bar") and @map(name: "bar").
    Keyword form wins when both are present.
    """
    positional = None
    for arg in arguments:
        if isinstance(arg, KeyValue):
            if arg.key == key:
                return arg.value if isinstance(arg.value, str) else None
            continue
        if positional is None:
            positional = arg
    return positional if isinstance(positional, str) else None
