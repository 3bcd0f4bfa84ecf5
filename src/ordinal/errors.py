"""Exception types raised by ordinal. Store failures are SQLAlchemy's own."""

from __future__ import annotations

from typing import Dict, List


class OrdinalError(Exception):
    """Base class for ordinal errors."""


class ConfigurationError(OrdinalError, ValueError):
    """The list options don't match the table (missing position or key column)."""


class InvalidPositionError(OrdinalError, ValueError):
    """A record was about to be written with a position that isn't a positive integer."""

    def __init__(self, errors: Dict[str, List[str]]):
        self.errors = errors
        detail = "; ".join(f"{field}: {', '.join(msgs)}" for field, msgs in errors.items())
        super().__init__(detail)
