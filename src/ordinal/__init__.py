"""
Public surface for ordinal.
Importing this module does **not** touch the database; call
`ordinal.init_ordinal()` (or build your own engine) during start-up.
"""

from .bootstrap import init_ordinal, positioned
from .core.config import ListConfig, Settings
from .core.mutations import PositionedList
from .core.record import Record
from .core.scope import CustomFn, FieldEquality, FixedPredicate
from .errors import ConfigurationError, InvalidPositionError, OrdinalError
from .events import on
from .lifecycle import create, destroy, on_create, on_destroy, validate

__all__ = [
    "ConfigurationError",
    "CustomFn",
    "FieldEquality",
    "FixedPredicate",
    "InvalidPositionError",
    "ListConfig",
    "OrdinalError",
    "PositionedList",
    "Record",
    "Settings",
    "create",
    "destroy",
    "init_ordinal",
    "on",
    "on_create",
    "on_destroy",
    "positioned",
    "validate",
]
