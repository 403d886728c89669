"""
Transaction Time - measures the time between two events sharing a UID

Pairs events by a correlation field regardless of their arrival order and
emits a TransactionTime event carrying the elapsed time for each pair.
"""

__version__ = "1.0.0"

from .config import AttachEvent, ReplaceTimestamp, TransactionTimeSettings
from .engine import FilterResult, TransactionTimeFilter
from .events import Event, Record
from .flusher import PeriodicFlusher
from .log_config import configure_logging

__all__ = [
    "AttachEvent",
    "ReplaceTimestamp",
    "TransactionTimeSettings",
    "FilterResult",
    "TransactionTimeFilter",
    "Event",
    "Record",
    "PeriodicFlusher",
    "configure_logging",
]
