from __future__ import annotations

import pytest

from prisma_safety.core.errors import AmbiguousIdentityError, ConfigError
from prisma_safety.core.safety.identity import resolve_snapshot
from prisma_safety.core.safety.matcher import match_fields, match_models
from prisma_safety.core.schema import parse_schema


def _views(text: str):
    return resolve_snapshot(parse_schema(text))


def test_models_match_by_table_mapping_not_declared_name():
    prev = _views('model Foo {\n  id Int\n  @@map("foo")\n}\nmodel Gone {\n  id Int\n}')
    cur = _views('model Bar {\n  id Int\n  @@map("foo")\n}\nmodel New {\n  id Int\n}')
    result = match_models(prev, cur)
    assert [(p.name, c.name) for p, c in result.matched] == [("Foo", "Bar")]
    assert [m.name for m in result.unmatched_previous] == ["Gone"]
    assert [m.name for m in result.unmatched_current] == ["New"]


def test_unmapped_declared_rename_breaks_the_match():
    prev = _views("model Foo {\n  id Int\n}")
    cur = _views("model Bar {\n  id Int\n}")
    result = match_models(prev, cur)
    assert result.matched == ()
    assert [m.name for m in result.unmatched_previous] == ["Foo"]


def test_matching_follows_previous_snapshot_order():
    prev = _views("model B {\n  id Int\n}\nmodel A {\n  id Int\n}")
    cur = _views("model A {\n  id Int\n}\nmodel B {\n  id Int\n}")
    assert [p.name for p, _ in match_models(prev, cur).matched] == ["B", "A"]


def test_two_models_on_one_table_are_ambiguous():
    cur = _views('model A {\n  id Int\n  @@map("t")\n}\nmodel B {\n  id Int\n  @@map("t")\n}')
    with pytest.raises(AmbiguousIdentityError) as exc:
        match_models((), cur)
    assert exc.value.details["identity"] == "t"
    with pytest.raises(AmbiguousIdentityError):
        match_models(cur, ())


def test_fields_match_by_column_and_skip_relations():
    (prev,) = _views('model Foo {\n  qid String\n  bar String @map("col")\n  other Foo?\n}')
    (cur,) = _views('model Foo {\n  baz String @map("col")\n  qid String\n}')
    result = match_fields(prev, cur)
    assert [(p.name, c.name) for p, c in result.matched] == [("qid", "qid"), ("bar", "baz")]
    assert result.unmatched_previous == ()


def test_declared_field_identity():
    (prev,) = _views('model Foo {\n  bar String @map("col")\n}')
    (cur,) = _views('model Foo {\n  baz String @map("col")\n}')
    result = match_fields(prev, cur, "declared")
    assert result.matched == ()
    assert [f.name for f in result.unmatched_previous] == ["bar"]
    assert [f.name for f in result.unmatched_current] == ["baz"]


def test_two_fields_on_one_column_are_ambiguous():
    (prev,) = _views('model Foo {\n  a String @map("col")\n  b String @map("col")\n}')
    (cur,) = _views("model Foo {\n  a String\n}")
    with pytest.raises(AmbiguousIdentityError, match="both resolve to 'col'"):
        match_fields(prev, cur)


def test_unknown_field_identity_is_rejected():
    (m,) = _views("model Foo {\n  a String\n}")
    with pytest.raises(ConfigError):
        match_fields(m, m, "fuzzy")
