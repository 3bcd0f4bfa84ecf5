"""
Scope resolution: which rows form "this record's list".

A scope is declared once per list as one of three variants and resolved
against a concrete record into a SQLAlchemy boolean clause:

* `FixedPredicate`  – literal SQL, used verbatim (blank ➜ whole table)
* `FieldEquality`   – `<field>[_id] = record.<field>[_id]`, or `IS NULL`
* `CustomFn`        – any callable of the record returning SQL text or a clause
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Literal, Union

from pydantic import BaseModel
from sqlalchemy import Table, text, true
from sqlalchemy.sql.elements import ColumnElement

from .logging import get_logger

logger = get_logger(__name__)

FK_SUFFIX = "_id"


class FixedPredicate(BaseModel):
    kind: Literal["fixed"] = "fixed"
    predicate: str = ""
    model_config = {"frozen": True}


class FieldEquality(BaseModel):
    kind: Literal["field"] = "field"
    field: str
    model_config = {"frozen": True}


class CustomFn(BaseModel):
    kind: Literal["custom"] = "custom"
    fn: Callable[[Any], Any]
    model_config = {"frozen": True, "arbitrary_types_allowed": True}


ScopeSpec = Union[FixedPredicate, FieldEquality, CustomFn]


# helpers
def has_column(column_names: Iterable[str], name: str) -> bool:
    """Schema check over a plain list of column names."""
    return name in set(column_names)


def foreign_key_column(field: str, column_names: Iterable[str]) -> str:
    """`contact` ➜ `contact_id` when the table has it, else `field` unchanged."""
    if not field.endswith(FK_SUFFIX) and has_column(column_names, field + FK_SUFFIX):
        return field + FK_SUFFIX
    return field


def as_scope(option: Any) -> ScopeSpec:
    """Coerce the loose ``scope`` option into one of the scope variants.

    A bare identifier is read as a field name, any other string as a literal
    predicate. Pass `FixedPredicate` explicitly for a one-word predicate.
    """
    if option is None:
        return FixedPredicate()
    if isinstance(option, (FixedPredicate, FieldEquality, CustomFn)):
        return option
    if callable(option):
        return CustomFn(fn=option)
    if isinstance(option, str):
        stripped = option.strip()
        if stripped.isidentifier():
            return FieldEquality(field=stripped)
        return FixedPredicate(predicate=stripped)
    raise TypeError(f"unsupported scope option: {option!r}")


def _as_clause(value: Any) -> ColumnElement[bool] | None:
    if value is None:
        return None
    if isinstance(value, str):
        # parenthesised so OR inside a literal can't leak into the AND chain
        return text(f"({value})") if value.strip() else None
    return value


def resolve_scope(record: Any, spec: ScopeSpec, table: Table) -> ColumnElement[bool]:
    """Return the boolean clause selecting `record`'s list in `table`."""
    match spec:
        case FixedPredicate(predicate=predicate):
            clause = _as_clause(predicate)
            return clause if clause is not None else true()

        case FieldEquality(field=field):
            name = foreign_key_column(field, table.c.keys())
            if not has_column(table.c.keys(), name):
                logger.warning(
                    "scope_fallback", table=table.name, field=field, reason="no such column"
                )
                return true()
            value = getattr(record, name, None)
            if value is None:
                return table.c[name].is_(None)
            return table.c[name] == value

        case CustomFn(fn=fn):
            clause = _as_clause(fn(record))
            if clause is None:
                logger.warning("scope_fallback", table=table.name, reason="blank predicate")
                return true()
            return clause

    raise TypeError(f"unknown scope spec: {spec!r}")
