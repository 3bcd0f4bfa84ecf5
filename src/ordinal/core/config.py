"""
Configuration models.

* `ListConfig` – per-list options handed to `ordinal.positioned()`.
* `Settings`   – process-level settings read from the environment / `.env`.
"""

from __future__ import annotations

import os
from typing import Any, Literal, Mapping

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator

from .logging import get_logger
from .scope import FixedPredicate, ScopeSpec, as_scope

logger = get_logger(__name__)

DEFAULT_COLUMN = "position"
DEFAULT_PRIMARY_KEY = "id"


class ListConfig(BaseModel):
    """Options for one positioned list."""

    column: str = DEFAULT_COLUMN
    scope: ScopeSpec = Field(default_factory=FixedPredicate)
    primary_key: str = DEFAULT_PRIMARY_KEY
    lock_rows: bool = True  # write-lock the scope before reading it
    isolation_level: str | None = None

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @field_validator("scope", mode="before")
    @classmethod
    def _coerce_scope(cls, value: Any) -> ScopeSpec:
        return as_scope(value)

    @field_validator("column", "primary_key")
    @classmethod
    def _identifier(cls, value: str) -> str:
        if not value.isidentifier():
            raise ValueError(f"{value!r} is not a column name")
        return value

    @classmethod
    def from_options(cls, options: Any = None) -> "ListConfig":
        """Build from a loose options mapping, dropping unknown keys."""
        if not isinstance(options, Mapping):
            options = {}
        known = {k: v for k, v in options.items() if k in cls.model_fields}
        unknown = sorted(set(options) - set(known))
        if unknown:
            logger.debug("list_options_ignored", options=unknown)
        return cls(**known)


class Settings(BaseModel):
    """Environment-driven settings (``ORDINAL_*`` variables)."""

    database_url: str = "sqlite:///ordinal.db"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_json: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))
        raw = {
            "database_url": os.environ.get("ORDINAL_DATABASE_URL"),
            "log_level": os.environ.get("ORDINAL_LOG_LEVEL"),
            "log_json": os.environ.get("ORDINAL_LOG_JSON"),
        }
        return cls.model_validate({k: v for k, v in raw.items() if v is not None})
