"""
Thin data-access layer around one positioned table.
Every statement runs on the Session handed in by the caller of
`transaction()`, so reads and writes of one operation share a transaction.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List

from sqlalchemy import ColumnElement, Row, Table, delete, event, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

# Session.info keys
_ACTIVE = "ordinal.operation"  # an ordinal operation is running on this session
_PENDING = "ordinal.pending"  # callbacks waiting for the commit
_HOOKED = "ordinal.hooked"  # commit/rollback listeners installed


class PositionStore:
    """Thin data-access layer around a positioned `Table`."""

    def __init__(self, engine: Engine, table: Table, *, isolation_level: str | None = None):
        if isolation_level is not None:
            engine = engine.execution_options(isolation_level=isolation_level)
        self.engine = engine
        self.table = table

    def _new_session(self) -> Session:  # separate to keep pylint happy
        return Session(bind=self.engine, future=True)

    # ---- transactions ---------------------------------------------------
    @contextmanager
    def transaction(self, session: Session | None = None) -> Iterator[Session]:
        """
        Run one operation atomically.

        • no session                  → short-lived Session(engine), committed here
        • session inside an operation → joined, no new transaction
        • session already in a txn    → SAVEPOINT; the caller owns the commit
        • idle session                → session.begin(), committed here

        Callbacks queued with `after_commit()` run once the outermost commit
        has happened and are dropped on rollback.
        """
        if session is None:
            with self._new_session() as s:
                with s.begin():
                    yield from self._marked(s)
                self._run_pending(s)
        elif session.info.get(_ACTIVE):
            yield session
        elif session.in_transaction():
            self._hook(session)
            with session.begin_nested():
                yield from self._marked(session)
        else:
            with session.begin():
                yield from self._marked(session)
            self._run_pending(session)

    @staticmethod
    def _marked(session: Session) -> Iterator[Session]:
        pending = session.info.setdefault(_PENDING, [])
        mark = len(pending)
        session.info[_ACTIVE] = True
        try:
            yield session
        except BaseException:
            del pending[mark:]
            raise
        finally:
            session.info.pop(_ACTIVE, None)

    def after_commit(self, session: Session, callback: Callable[[], None]) -> None:
        """Queue `callback` until the transaction running on `session` commits."""
        session.info.setdefault(_PENDING, []).append(callback)

    @staticmethod
    def _run_pending(session: Session) -> None:
        for callback in session.info.pop(_PENDING, []):
            callback()

    @classmethod
    def _hook(cls, session: Session) -> None:
        """Caller-owned transaction: flush the queue on its commit, drop it on rollback."""
        if session.info.get(_HOOKED):
            return
        session.info[_HOOKED] = True
        event.listen(session, "after_commit", cls._run_pending)
        event.listen(session, "after_rollback", lambda s: s.info.pop(_PENDING, None))

    def lock(self, session: Session, where: ColumnElement[bool], key: str, column: str) -> None:
        """
        Serialize writers on the rows matching `where`.

        SQLite has no FOR UPDATE and pysqlite only sends BEGIN before DML, so
        there a no-op UPDATE takes the database write lock before any read.
        """
        if session.get_bind().dialect.name == "sqlite":
            session.execute(
                update(self.table).where(where).values({column: self.table.c[column]})
            )
            return
        session.execute(select(self.table.c[key]).where(where).with_for_update()).all()

    # ---- reads ----------------------------------------------------------
    def get(self, session: Session, key: str, value: Any) -> Row | None:
        q = select(self.table).where(self.table.c[key] == value)
        return session.execute(q).first()

    def first(
        self, session: Session, where: ColumnElement[bool], *order_by: Any
    ) -> Row | None:
        q = select(self.table).where(where).order_by(*order_by).limit(1)
        return session.execute(q).first()

    def all(self, session: Session, where: ColumnElement[bool], *order_by: Any) -> List[Row]:
        q = select(self.table).where(where).order_by(*order_by)
        return list(session.execute(q))

    # ---- writes ---------------------------------------------------------
    def update_all(
        self, session: Session, values: Dict[str, Any], where: ColumnElement[bool]
    ) -> int:
        """One UPDATE over every matching row; returns the affected-row count."""
        result = session.execute(update(self.table).where(where).values(**values))
        return result.rowcount

    def update_one(self, session: Session, key: str, value: Any, column: str, new: Any) -> None:
        session.execute(
            update(self.table).where(self.table.c[key] == value).values({column: new})
        )

    def insert(self, session: Session, values: Dict[str, Any], key: str) -> Any:
        """Insert one row and return its primary key."""
        result = session.execute(insert(self.table).values(**values))
        if values.get(key) is not None:
            return values[key]
        return result.inserted_primary_key[0]

    def delete(self, session: Session, key: str, value: Any) -> None:
        session.execute(delete(self.table).where(self.table.c[key] == value))
