"""
ordinal.events  ──  Change notifications for positioned lists

    from ordinal import on

    @on.move(phones)
    def bust_cache(record): ...

Handlers run synchronously after the transaction that made the change has
committed, so they see the final id and position. Nothing fires for a
rolled-back operation. Inside a caller-owned transaction the handlers wait
for that transaction's commit. Exceptions they raise propagate to whoever
committed.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Dict, Set, Union

from sqlalchemy import Table

EVENT_TYPES = ("insert", "move", "remove")

TableRef = Union[Table, str]


def _name(table: TableRef) -> str:
    return table if isinstance(table, str) else table.name


class EventRegistry:
    """Handlers for list changes, keyed by event type and table name."""

    def __init__(self):
        # event type -> table name -> handlers
        self._handlers: Dict[str, Dict[str, Set[Callable]]] = {
            event_type: defaultdict(set) for event_type in EVENT_TYPES
        }

    def register(
        self, event_type: str, tables: tuple[TableRef, ...], handler: Callable
    ) -> None:
        """Call `handler` for `event_type` changes on any of `tables`."""
        for table in tables:
            self._handlers[event_type][_name(table)].add(handler)

    def unregister(self, handler: Callable) -> None:
        for by_table in self._handlers.values():
            for handlers in by_table.values():
                handlers.discard(handler)

    def emit(self, event_type: str, table: TableRef, record: Any) -> None:
        """Hand `record` to every handler watching `table` for `event_type`."""
        for handler in list(self._handlers[event_type].get(_name(table), ())):
            handler(record)


# process-wide; lists register by table name
_registry = EventRegistry()


class OnDecorator:
    """`@on.insert(table)`, `@on.move(table)`, `@on.remove(table)`."""

    @staticmethod
    def insert(*tables: TableRef) -> Callable:
        """A record entered a list (bottom, top or a given rank)."""

        def decorator(func: Callable) -> Callable:
            _registry.register("insert", tables, func)
            return func

        return decorator

    @staticmethod
    def move(*tables: TableRef) -> Callable:
        """A record changed rank inside its list."""

        def decorator(func: Callable) -> Callable:
            _registry.register("move", tables, func)
            return func

        return decorator

    @staticmethod
    def remove(*tables: TableRef) -> Callable:
        """A record left its list (removed or about to be destroyed)."""

        def decorator(func: Callable) -> Callable:
            _registry.register("remove", tables, func)
            return func

        return decorator


on = OnDecorator()


def emit(event_type: str, table: TableRef, record: Any) -> None:
    _registry.emit(event_type, table, record)


def unregister(handler: Callable) -> None:
    _registry.unregister(handler)
