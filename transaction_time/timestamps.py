"""
Timestamp resolution for transaction pairs

Events may arrive in any order, so the elapsed time is always the absolute
difference between the two timestamps and the oldest/newest designations are
decided by timestamp, never by arrival.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

import structlog

from transaction_time.events import Record

logger = structlog.get_logger()


class Side(str, Enum):
    """Position of an event within its transaction, by arrival"""
    OPEN = "open"
    CLOSE = "close"


def to_datetime(value: Any) -> Optional[datetime]:
    """
    Normalize a timestamp value to an aware datetime

    Accepts datetime objects (naive values are taken as UTC), ISO-8601
    strings and epoch seconds. Returns None for anything else.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
        except ValueError:
            return None
        return to_datetime(parsed)

    return None


def resolve_timestamp(record: Record, field: str) -> Optional[datetime]:
    """Read and normalize the timestamp stored in ``field`` of a record"""
    raw = record.get(field)
    timestamp = to_datetime(raw)
    if timestamp is None and raw is not None:
        logger.debug("timestamp_unresolved", field=field, value=repr(raw))
    return timestamp


@dataclass(frozen=True)
class TimestampPair:
    """
    Timestamps of the open and close events of a transaction

    On equal timestamps the close event is designated oldest and the open
    event newest.
    """
    open: Optional[datetime]
    close: Optional[datetime]

    @property
    def valid(self) -> bool:
        return self.open is not None and self.close is not None

    @property
    def elapsed(self) -> Optional[float]:
        """Seconds between the two timestamps, None if either is missing"""
        if not self.valid:
            return None
        return abs((self.close - self.open).total_seconds())

    @property
    def oldest(self) -> Optional[datetime]:
        if not self.valid:
            return None
        return min(self.open, self.close)

    @property
    def newest(self) -> Optional[datetime]:
        if not self.valid:
            return None
        return max(self.open, self.close)

    @property
    def oldest_side(self) -> Optional[Side]:
        if not self.valid:
            return None
        return Side.OPEN if self.open < self.close else Side.CLOSE

    @property
    def newest_side(self) -> Optional[Side]:
        if not self.valid:
            return None
        return Side.OPEN if self.open >= self.close else Side.CLOSE
