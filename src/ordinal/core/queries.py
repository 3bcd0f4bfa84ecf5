"""
Read-only position queries. Every method takes the operation's Session so
the reads see the same transaction as the writes that follow them.
"""

from __future__ import annotations

from typing import Any, List

from sqlalchemy import ColumnElement, and_
from sqlalchemy.orm import Session

from ..persistence.store import PositionStore
from .config import ListConfig
from .record import Record


class PositionQueries:
    def __init__(self, store: PositionStore, config: ListConfig):
        self.store = store
        self.config = config

    @property
    def position(self):
        return self.store.table.c[self.config.column]

    @property
    def key(self):
        return self.store.table.c[self.config.primary_key]

    def position_of(self, record: Any) -> int | None:
        return getattr(record, self.config.column, None)

    def identity_of(self, record: Any) -> Any:
        return getattr(record, self.config.primary_key, None)

    def is_in_list(self, record: Any) -> bool:
        return self.position_of(record) is not None

    def current_position(self, session: Session, record: Any) -> int | None:
        """Stored position of `record`; the local value when it was never saved."""
        identity = self.identity_of(record)
        if identity is None:
            return self.position_of(record)
        row = self.store.get(session, self.config.primary_key, identity)
        if row is None:
            return None
        return row._mapping[self.config.column]

    def bottom_item(
        self, session: Session, scope: ColumnElement[bool], excluding: Any = None
    ) -> Record | None:
        conditions = [scope, self.position.is_not(None)]
        if excluding is not None:
            conditions.append(self.key != excluding)
        row = self.store.first(session, and_(*conditions), self.position.desc())
        return Record.from_row(row) if row else None

    def bottom_position(
        self, session: Session, scope: ColumnElement[bool], excluding: Any = None
    ) -> int:
        """Highest position in `scope`, or 0 when the scope is empty."""
        item = self.bottom_item(session, scope, excluding)
        return self.position_of(item) if item else 0

    def item_at(
        self, session: Session, scope: ColumnElement[bool], position: int
    ) -> Record | None:
        row = self.store.first(session, and_(scope, self.position == position))
        return Record.from_row(row) if row else None

    def neighbor_above(
        self, session: Session, record: Any, scope: ColumnElement[bool]
    ) -> Record | None:
        if not self.is_in_list(record):
            return None
        return self.item_at(session, scope, self.position_of(record) - 1)

    def neighbor_below(
        self, session: Session, record: Any, scope: ColumnElement[bool]
    ) -> Record | None:
        if not self.is_in_list(record):
            return None
        return self.item_at(session, scope, self.position_of(record) + 1)

    def ordered(self, session: Session, scope: ColumnElement[bool]) -> List[Record]:
        rows = self.store.all(
            session, and_(scope, self.position.is_not(None)), self.position.asc()
        )
        return [Record.from_row(row) for row in rows]
