"""Shared fixtures: a file-backed SQLite database with four positioned tables.

* phones   – scope ``contact_id`` (explicit foreign key)
* emails   – column ``pos``, scope ``contact`` (``_id`` appended)
* websites – scope from a callable
* labels   – unscoped, several kinds share one list
"""

from __future__ import annotations

from typing import Any, Iterator, List

import pytest
from sqlalchemy import Column, Integer, MetaData, String, Table, create_engine
from sqlalchemy.engine import Engine

from ordinal import PositionedList, Record, create, positioned
from ordinal.persistence.models import positioned_table


@pytest.fixture
def metadata() -> MetaData:
    return MetaData()


@pytest.fixture
def tables(metadata: MetaData) -> dict[str, Table]:
    return {
        "phones": positioned_table(
            "phones",
            metadata,
            Column("contact_id", Integer, nullable=True),
            Column("number", String),
        ),
        "emails": positioned_table(
            "emails",
            metadata,
            Column("contact_id", Integer, nullable=True),
            Column("address", String),
            position_column="pos",
        ),
        "websites": positioned_table(
            "websites",
            metadata,
            Column("contact_id", Integer, nullable=True),
            Column("address", String),
        ),
        "labels": positioned_table(
            "labels",
            metadata,
            Column("type", String),
            Column("label", String),
        ),
    }


@pytest.fixture
def engine(tmp_path, metadata: MetaData, tables: dict[str, Table]) -> Iterator[Engine]:
    engine = create_engine(f"sqlite:///{tmp_path / 'lists.db'}", future=True)
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def phones(engine: Engine, tables: dict[str, Table]) -> PositionedList:
    plist = positioned(tables["phones"], engine, scope="contact_id")
    for contact_id, number in [
        (1, "901.555.1111"),
        (1, "901.555.2222"),
        (1, "901.555.3333"),
        (1, "901.555.4444"),
        (2, "901.555.5555"),
        (2, "901.555.6666"),
    ]:
        create(plist, {"contact_id": contact_id, "number": number})
    return plist


@pytest.fixture
def emails(engine: Engine, tables: dict[str, Table]) -> PositionedList:
    plist = positioned(tables["emails"], engine, column="pos", scope="contact")
    for contact_id, address in [
        (1, "jdugan@coroutine.com"),
        (1, "jdugan@example.com"),
        (2, "tlowrimore@coroutine.com"),
        (2, "tlowrimore@example.com"),
    ]:
        create(plist, {"contact_id": contact_id, "address": address})
    return plist


@pytest.fixture
def websites(engine: Engine, tables: dict[str, Table]) -> PositionedList:
    plist = positioned(
        tables["websites"],
        engine,
        scope=lambda record: f"contact_id = {record.contact_id}",
    )
    for contact_id, address in [
        (1, "http://coroutine.com"),
        (1, "http://johndugan.me"),
        (2, "http://coroutine.com"),
        (2, "http://timlowrimore.me"),
    ]:
        create(plist, {"contact_id": contact_id, "address": address})
    return plist


@pytest.fixture
def labels(engine: Engine, tables: dict[str, Table]) -> PositionedList:
    plist = positioned(tables["labels"], engine)
    for label in ("Weekly", "Monthly", "Quarterly", "Yearly"):
        create(plist, {"type": "BillingFrequency", "label": label})
    return plist


def find(plist: PositionedList, identity: Any):
    """Fresh snapshot of one row, like a reload from the database."""
    with plist.store.transaction() as session:
        row = plist.store.get(session, plist.config.primary_key, identity)
    return Record.from_row(row) if row else None


def ids(plist: PositionedList, record: Any) -> List[Any]:
    return [item.id for item in plist.items(record)]
