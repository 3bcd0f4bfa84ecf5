"""
The positioned-list engine.

`PositionedList` keeps the non-null positions of every scope at exactly
1..N. Each public operation is one transaction that

1. resolves the record's scope,
2. locks the scope's rows (unless ``lock_rows=False``),
3. re-reads the record's stored position,
4. applies bulk shifts (one UPDATE each) and a single-row assignment.

Operations write the new position back onto the object they were given.
Sibling objects the caller holds are *not* refreshed; use `reload()`.
Change events are queued on the session and fire after the commit.
"""

from __future__ import annotations

from contextlib import contextmanager
from functools import partial
from typing import Any, Iterator, List, Tuple

from sqlalchemy import ColumnElement, Table, and_
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from .. import events
from ..errors import ConfigurationError
from ..persistence.store import PositionStore
from .config import ListConfig
from .logging import get_logger
from .queries import PositionQueries
from .record import Record, position_errors
from .scope import resolve_scope

logger = get_logger(__name__)


class PositionedList:
    """Positioned-list behaviour for the rows of one table."""

    def __init__(self, table: Table, engine: Engine, config: ListConfig | None = None):
        self.table = table
        self.config = config or ListConfig()
        for name in (self.config.column, self.config.primary_key):
            if name not in table.c:
                raise ConfigurationError(f"table {table.name!r} has no column {name!r}")
        self.store = PositionStore(engine, table, isolation_level=self.config.isolation_level)
        self.queries = PositionQueries(self.store, self.config)

    def __repr__(self) -> str:
        return f"PositionedList({self.table.name}.{self.config.column})"

    @property
    def column(self) -> str:
        return self.config.column

    @property
    def _position(self):
        return self.table.c[self.config.column]

    def scope_condition(self, record: Any) -> ColumnElement[bool]:
        """The predicate selecting `record`'s list."""
        return resolve_scope(record, self.config.scope, self.table)

    # ------------------------------------------------------------------ #
    # plumbing
    # ------------------------------------------------------------------ #
    @contextmanager
    def _operation(
        self, record: Any, session: Session | None, *, lock: bool = True
    ) -> Iterator[Tuple[Session, ColumnElement[bool]]]:
        scope = self.scope_condition(record)
        original = getattr(record, self.column, None)
        try:
            with self.store.transaction(session) as s:
                if lock and self.config.lock_rows:
                    self.store.lock(s, scope, self.config.primary_key, self.column)
                self._refresh(s, record)
                original = self.queries.position_of(record)
                yield s, scope
        except BaseException:
            # rolled back: the object goes back to what the store holds
            setattr(record, self.column, original)
            raise

    def _refresh(self, session: Session, record: Any) -> None:
        setattr(record, self.column, self.queries.current_position(session, record))

    def _assign(self, session: Session, record: Any, value: int | None) -> None:
        identity = self.queries.identity_of(record)
        if identity is not None:
            self.store.update_one(session, self.config.primary_key, identity, self.column, value)
        setattr(record, self.column, value)

    def _shift(
        self, session: Session, scope: ColumnElement[bool], delta: int, *conditions: Any
    ) -> None:
        self.store.update_all(
            session, {self.column: self._position + delta}, and_(scope, *conditions)
        )

    def _step(self, session: Session, record: Any, delta: int) -> bool:
        position = self.queries.position_of(record)
        if position is None:
            return False
        self._assign(session, record, position + delta)
        return True

    def _close_gap(self, session: Session, record: Any, scope: ColumnElement[bool]) -> bool:
        """Pull every row below `record` up by one; False when not in the list."""
        position = self.queries.position_of(record)
        if position is None or self.queries.identity_of(record) is None:
            return False
        self._shift(session, scope, -1, self._position > position)
        return True

    def _remove(self, session: Session, record: Any, scope: ColumnElement[bool]) -> bool:
        if not self.queries.is_in_list(record):
            return False
        self._close_gap(session, record, scope)
        self._assign(session, record, None)
        return True

    def _changed(self, session: Session, event_type: str, record: Any, operation: str) -> None:
        logger.debug(
            "position_changed",
            table=self.table.name,
            operation=operation,
            record_id=self.queries.identity_of(record),
            position=self.queries.position_of(record),
        )
        self.store.after_commit(session, partial(events.emit, event_type, self.table, record))

    # ------------------------------------------------------------------ #
    # inserts
    # ------------------------------------------------------------------ #
    def insert_at_bottom(self, record: Any, session: Session | None = None) -> None:
        """Put `record` after the last item of its list."""
        with self._operation(record, session) as (s, scope):
            self._close_gap(s, record, scope)
            bottom = self.queries.bottom_position(
                s, scope, excluding=self.queries.identity_of(record)
            )
            self._assign(s, record, bottom + 1)
            self._changed(s, "insert", record, "insert_at_bottom")

    def insert_at_top(self, record: Any, session: Session | None = None) -> None:
        """Put `record` at position 1, pushing the whole list down."""
        with self._operation(record, session) as (s, scope):
            self._remove(s, record, scope)
            self._shift(s, scope, +1)
            self._assign(s, record, 1)
            self._changed(s, "insert", record, "insert_at_top")

    def insert_at(self, record: Any, position: int = 1, session: Session | None = None) -> None:
        """
        Put `record` at `position`; items from there on move down one.

        A position past the end of the list lands on the bottom instead of
        leaving a hole.
        """
        if position is None or position_errors(position):
            raise ValueError(f"position must be a positive integer, got {position!r}")
        with self._operation(record, session) as (s, scope):
            self._remove(s, record, scope)
            target = min(position, self.queries.bottom_position(s, scope) + 1)
            self._shift(s, scope, +1, self._position >= target)
            self._assign(s, record, target)
            self._changed(s, "insert", record, "insert_at")

    # ------------------------------------------------------------------ #
    # moves
    # ------------------------------------------------------------------ #
    def move_higher(self, record: Any, session: Session | None = None) -> None:
        """Swap with the item above; nothing happens at the top."""
        with self._operation(record, session) as (s, scope):
            above = self.queries.neighbor_above(s, record, scope)
            if above is not None:
                self._step(s, above, +1)
                self._step(s, record, -1)
                self._changed(s, "move", record, "move_higher")

    def move_lower(self, record: Any, session: Session | None = None) -> None:
        """Swap with the item below; nothing happens at the bottom."""
        with self._operation(record, session) as (s, scope):
            below = self.queries.neighbor_below(s, record, scope)
            if below is not None:
                self._step(s, below, -1)
                self._step(s, record, +1)
                self._changed(s, "move", record, "move_lower")

    def move_to_top(self, record: Any, session: Session | None = None) -> None:
        with self._operation(record, session) as (s, scope):
            position = self.queries.position_of(record)
            if position is not None:
                self._shift(s, scope, +1, self._position < position)
                self._assign(s, record, 1)
                self._changed(s, "move", record, "move_to_top")

    def move_to_bottom(self, record: Any, session: Session | None = None) -> None:
        with self._operation(record, session) as (s, scope):
            position = self.queries.position_of(record)
            if position is not None:
                self._shift(s, scope, -1, self._position > position)
                bottom = self.queries.bottom_position(
                    s, scope, excluding=self.queries.identity_of(record)
                )
                self._assign(s, record, bottom + 1)
                self._changed(s, "move", record, "move_to_bottom")

    def increment_position(self, record: Any, session: Session | None = None) -> None:
        """Position + 1 on this record alone; the rest of the list is untouched."""
        with self._operation(record, session) as (s, _scope):
            if self._step(s, record, +1):
                self._changed(s, "move", record, "increment_position")

    def decrement_position(self, record: Any, session: Session | None = None) -> None:
        """Position - 1 on this record alone; the rest of the list is untouched."""
        with self._operation(record, session) as (s, _scope):
            if self._step(s, record, -1):
                self._changed(s, "move", record, "decrement_position")

    # ------------------------------------------------------------------ #
    # removal
    # ------------------------------------------------------------------ #
    def remove(self, record: Any, session: Session | None = None) -> None:
        """Take `record` out of its list (position becomes None) and close the gap."""
        with self._operation(record, session) as (s, scope):
            if self._remove(s, record, scope):
                self._changed(s, "remove", record, "remove")

    remove_from_list = remove

    def close_gap(self, record: Any, session: Session | None = None) -> bool:
        """
        Close the gap `record` will leave, without touching its own row.

        Used right before the row is deleted. A record already removed has no
        position, so this is a no-op and the shift is never applied twice.
        """
        with self._operation(record, session) as (s, scope):
            closed = self._close_gap(s, record, scope)
            if closed:
                self._changed(s, "remove", record, "close_gap")
        return closed

    # ------------------------------------------------------------------ #
    # queries
    # ------------------------------------------------------------------ #
    def is_in_list(self, record: Any) -> bool:
        return self.queries.is_in_list(record)

    in_list = is_in_list

    def is_first(self, record: Any, session: Session | None = None) -> bool:
        with self._operation(record, session, lock=False):
            return self.queries.position_of(record) == 1

    def is_last(self, record: Any, session: Session | None = None) -> bool:
        with self._operation(record, session, lock=False) as (s, scope):
            position = self.queries.position_of(record)
            if position is None:
                return False
            return position == self.queries.bottom_position(s, scope)

    def higher_item(self, record: Any, session: Session | None = None) -> Record | None:
        with self._operation(record, session, lock=False) as (s, scope):
            return self.queries.neighbor_above(s, record, scope)

    def lower_item(self, record: Any, session: Session | None = None) -> Record | None:
        with self._operation(record, session, lock=False) as (s, scope):
            return self.queries.neighbor_below(s, record, scope)

    def bottom_position(self, record: Any, session: Session | None = None) -> int:
        """Highest position in `record`'s list (0 when empty)."""
        with self._operation(record, session, lock=False) as (s, scope):
            return self.queries.bottom_position(s, scope)

    def items(self, record: Any, session: Session | None = None) -> List[Record]:
        """The in-list members of `record`'s list, top to bottom."""
        with self._operation(record, session, lock=False) as (s, scope):
            return self.queries.ordered(s, scope)

    def reload(self, record: Any, session: Session | None = None) -> Any:
        """Refresh `record`'s position from the store and return it."""
        with self._operation(record, session, lock=False):
            return record
