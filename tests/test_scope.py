"""Scope resolution, no database needed."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from sqlalchemy import Column, Integer, MetaData, String, Table, column
from sqlalchemy.sql.elements import True_

from ordinal.core.scope import (
    CustomFn,
    FieldEquality,
    FixedPredicate,
    as_scope,
    foreign_key_column,
    has_column,
    resolve_scope,
)


@pytest.fixture
def emails() -> Table:
    return Table(
        "emails",
        MetaData(),
        Column("id", Integer, primary_key=True),
        Column("contact_id", Integer),
        Column("kind", String),
        Column("pos", Integer),
    )


def sql(clause) -> str:
    return str(clause.compile(compile_kwargs={"literal_binds": True}))


class TestSchemaHelpers:
    def test_has_column(self) -> None:
        assert has_column(["id", "contact_id"], "contact_id")
        assert not has_column(["id", "contact_id"], "contact")

    def test_suffix_appended_when_column_exists(self) -> None:
        assert foreign_key_column("contact", ["id", "contact_id"]) == "contact_id"

    def test_suffix_kept_when_already_present(self) -> None:
        assert foreign_key_column("contact_id", ["id", "contact_id"]) == "contact_id"

    def test_field_used_as_is_without_matching_column(self) -> None:
        assert foreign_key_column("kind", ["id", "kind"]) == "kind"


class TestAsScope:
    def test_none_is_unscoped(self) -> None:
        assert as_scope(None) == FixedPredicate()

    def test_identifier_is_a_field(self) -> None:
        assert as_scope("contact") == FieldEquality(field="contact")

    def test_other_strings_are_literal(self) -> None:
        assert as_scope("contact_id = 1 AND done = 0") == FixedPredicate(
            predicate="contact_id = 1 AND done = 0"
        )

    def test_callable_is_custom(self) -> None:
        fn = lambda record: "1 = 1"  # noqa: E731
        assert as_scope(fn).fn is fn

    def test_variants_pass_through(self) -> None:
        spec = FixedPredicate(predicate="archived")
        assert as_scope(spec) is spec

    def test_rejects_other_types(self) -> None:
        with pytest.raises(TypeError):
            as_scope(42)


class TestResolveScope:
    def test_field_equality_with_suffix(self, emails: Table) -> None:
        record = SimpleNamespace(contact_id=7)
        clause = resolve_scope(record, FieldEquality(field="contact"), emails)
        assert sql(clause) == "emails.contact_id = 7"

    def test_absent_value_means_is_null(self, emails: Table) -> None:
        record = SimpleNamespace(contact_id=None)
        clause = resolve_scope(record, FieldEquality(field="contact_id"), emails)
        assert sql(clause) == "emails.contact_id IS NULL"

    def test_missing_attribute_means_is_null(self, emails: Table) -> None:
        clause = resolve_scope(SimpleNamespace(), FieldEquality(field="contact"), emails)
        assert sql(clause) == "emails.contact_id IS NULL"

    def test_unknown_field_falls_back_to_whole_table(self, emails: Table) -> None:
        clause = resolve_scope(SimpleNamespace(), FieldEquality(field="owner"), emails)
        assert isinstance(clause, True_)

    def test_fixed_predicate_is_parenthesised(self, emails: Table) -> None:
        clause = resolve_scope(None, FixedPredicate(predicate="kind = 'a' OR kind = 'b'"), emails)
        assert str(clause) == "(kind = 'a' OR kind = 'b')"

    @pytest.mark.parametrize("predicate", ["", "   "])
    def test_blank_fixed_predicate_is_whole_table(self, emails: Table, predicate: str) -> None:
        assert isinstance(resolve_scope(None, FixedPredicate(predicate=predicate), emails), True_)

    def test_custom_fn_string(self, emails: Table) -> None:
        spec = CustomFn(fn=lambda r: f"contact_id = {r.contact_id} AND kind = '{r.kind}'")
        clause = resolve_scope(SimpleNamespace(contact_id=3, kind="work"), spec, emails)
        assert str(clause) == "(contact_id = 3 AND kind = 'work')"

    def test_custom_fn_clause(self, emails: Table) -> None:
        spec = CustomFn(fn=lambda r: column("kind") == r.kind)
        clause = resolve_scope(SimpleNamespace(kind="home"), spec, emails)
        assert sql(clause) == "kind = 'home'"

    def test_custom_fn_blank_falls_back(self, emails: Table) -> None:
        clause = resolve_scope(SimpleNamespace(), CustomFn(fn=lambda r: None), emails)
        assert isinstance(clause, True_)

    def test_resolution_follows_current_values(self, emails: Table) -> None:
        record = SimpleNamespace(contact_id=1)
        spec = FieldEquality(field="contact")
        assert sql(resolve_scope(record, spec, emails)) == "emails.contact_id = 1"
        record.contact_id = 2
        assert sql(resolve_scope(record, spec, emails)) == "emails.contact_id = 2"
