"""
Create / destroy integration.

The owning record's persistence code calls these explicitly:

    on_create(phones, phone, session)   # before INSERT
    on_destroy(phones, phone, session)  # before DELETE

`create()` and `destroy()` bundle the hook with the row write in a single
transaction for callers that go through `PositionStore` directly.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from sqlalchemy.orm import Session

from .core.logging import get_logger
from .core.mutations import PositionedList
from .core.record import Record, is_blank, position_errors
from .errors import InvalidPositionError

logger = get_logger(__name__)


def validate(plist: PositionedList, record: Any) -> Dict[str, List[str]]:
    """Field errors for `record`'s position; empty when valid. Never raises."""
    errors = position_errors(getattr(record, plist.column, None))
    return {plist.column: errors} if errors else {}


def on_create(plist: PositionedList, record: Any, session: Session | None = None) -> Any:
    """Give a record without a position the bottom slot of its list."""
    value = getattr(record, plist.column, None)
    if is_blank(value):
        setattr(record, plist.column, None)
        plist.insert_at_bottom(record, session)
    return record


def on_destroy(plist: PositionedList, record: Any, session: Session | None = None) -> None:
    """Close the gap the record leaves; no-op when it was already removed."""
    plist.close_gap(record, session)


def create(
    plist: PositionedList, values: Mapping[str, Any], session: Session | None = None
) -> Record:
    """
    Insert a row at the bottom of its list, or at the given position.

    An explicit position is applied with `insert_at`, so the rows already
    there move down instead of sharing the slot.
    """
    key = plist.config.primary_key
    record = Record(**{key: None, **values})
    requested = getattr(record, plist.column, None)
    with plist.store.transaction(session) as s:
        if is_blank(requested):
            on_create(plist, record, s)
        else:
            errors = validate(plist, record)
            if errors:
                raise InvalidPositionError(errors)
            setattr(record, plist.column, None)
        row = {k: v for k, v in record.model_dump().items() if not (k == key and v is None)}
        identity = plist.store.insert(s, row, key)
        setattr(record, key, identity)
        if not is_blank(requested):
            plist.insert_at(record, requested, s)
    logger.debug(
        "record_created",
        table=plist.table.name,
        record_id=identity,
        position=getattr(record, plist.column),
    )
    return record


def destroy(plist: PositionedList, record: Any, session: Session | None = None) -> None:
    """Delete the record's row after closing the gap it leaves."""
    key = plist.config.primary_key
    with plist.store.transaction(session) as s:
        on_destroy(plist, record, s)
        plist.store.delete(s, key, getattr(record, key))
    logger.debug("record_destroyed", table=plist.table.name, record_id=getattr(record, key))
