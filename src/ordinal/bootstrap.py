"""
Entry points that wire SQLAlchemy into ordinal.
Call `init_ordinal()` once at start-up, then `positioned()` per list.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Table, create_engine
from sqlalchemy.engine import Engine

from .core.config import ListConfig, Settings
from .core.logging import configure_logging, get_logger
from .core.mutations import PositionedList

logger = get_logger(__name__)


def init_ordinal(settings: Settings | None = None) -> Engine:
    """Configure logging from `settings` (default: the environment) and return an engine."""
    settings = settings or Settings.from_env()
    configure_logging(json_output=settings.log_json, level=settings.log_level)
    engine = create_engine(settings.database_url, pool_pre_ping=True, future=True)
    logger.info("ordinal_initialised", database=engine.url.render_as_string(hide_password=True))
    return engine


def positioned(table: Table, engine: Engine, **options: Any) -> PositionedList:
    """
    Register `table` as a positioned list.

        phones = positioned(phones_table, engine, scope="contact")

    Options: ``column`` (default ``"position"``), ``scope``, ``primary_key``,
    ``lock_rows``, ``isolation_level``. Unknown options are ignored.
    """
    config = ListConfig.from_options(options)
    plist = PositionedList(table, engine, config)
    logger.debug(
        "list_registered",
        table=table.name,
        column=config.column,
        scope=config.scope.kind,
    )
    return plist
