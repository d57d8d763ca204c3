from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Generic, Sequence, Tuple, TypeVar

from prisma_safety.core.errors import AmbiguousIdentityError, ConfigError
from prisma_safety.core.safety.identity import FieldView, ModelView


FIELD_IDENTITY_PHYSICAL = "physical"
FIELD_IDENTITY_DECLARED = "declared"
FIELD_IDENTITIES = (FIELD_IDENTITY_PHYSICAL, FIELD_IDENTITY_DECLARED)

T = TypeVar("T", ModelView, FieldView)


@dataclass(frozen=True)
class MatchResult(Generic[T]):
    matched: Tuple[Tuple[T, T], ...] = ()
    unmatched_previous: Tuple[T, ...] = ()
    unmatched_current: Tuple[T, ...] = ()


ModelMatch = MatchResult[ModelView]
FieldMatch = MatchResult[FieldView]


def _index(items: Sequence[T], key: Callable[[T], str], scope: str) -> Dict[str, T]:
    out: Dict[str, T] = {}
    for item in items:
        k = key(item)
        if k in out:
            raise AmbiguousIdentityError(
                f"{scope}: {out[k].name!r} and {item.name!r} both resolve to {k!r}",
                details={"scope": scope, "identity": k, "names": [out[k].name, item.name]},
            )
        out[k] = item
    return out


def _match(previous: Sequence[T], current: Sequence[T], key: Callable[[T], str], scope: str) -> MatchResult[T]:
    # Both sides are indexed so ambiguity is caught in either snapshot.
    _index(previous, key, f"previous {scope}")
    current_by_key = _index(current, key, f"current {scope}")

    matched = []
    unmatched = []
    seen = set()
    for item in previous:
        k = key(item)
        other = current_by_key.get(k)
        if other is None:
            unmatched.append(item)
        else:
            matched.append((item, other))
            seen.add(k)

    added = tuple(item for item in current if key(item) not in seen)
    return MatchResult(matched=tuple(matched), unmatched_previous=tuple(unmatched), unmatched_current=added)


def match_models(previous: Sequence[ModelView], current: Sequence[ModelView]) -> ModelMatch:
    """Pair models across snapshots by effective table name."""
    return _match(previous, current, lambda m: m.physical_name, "schema")


def match_fields(
    previous: ModelView,
    current: ModelView,
    identity: str = FIELD_IDENTITY_PHYSICAL,
) -> FieldMatch:
    """
    Pair the column-backed fields of a matched model pair. Relation fields
    never take part.
    """
    if identity == FIELD_IDENTITY_PHYSICAL:
        key: Callable[[FieldView], str] = lambda f: f.physical_name
    elif identity == FIELD_IDENTITY_DECLARED:
        key = lambda f: f.name
    else:
        raise ConfigError(f"Unknown field identity {identity!r}; expected one of {', '.join(FIELD_IDENTITIES)}")

    scope = f"model {current.name!r} (table {current.physical_name!r})"
    return _match(previous.column_fields, current.column_fields, key, scope)


def check_column_identities(models: Sequence[ModelView], side: str) -> None:
    """
    Every model of a snapshot, matched or not, must map its column-backed
    fields to distinct columns.
    """
    for model in models:
        _index(
            model.column_fields,
            lambda f: f.physical_name,
            f"{side} model {model.name!r} (table {model.physical_name!r})",
        )
