"""Transaction state for the transaction time filter

This module keeps the open transactions of one filter instance in memory.
The store itself is not thread-safe; ``TransactionTimeFilter`` serializes
every call under its lock.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Hashable, List, Optional

import structlog

from transaction_time.events import Record
from transaction_time.timestamps import Side, TimestampPair

logger = structlog.get_logger()


class Transaction:
    """Represents one transaction (a pair of events sharing a UID)

    Events are kept only when the filter needs them later (attach_event or
    store_data). The age is advanced by the flush sweep while the
    transaction is open.
    """

    def __init__(
        self,
        uid: Hashable,
        open_timestamp: Optional[datetime] = None,
        open_record: Optional[Record] = None,
    ):
        self.uid = uid
        self.open_record = open_record
        self.open_timestamp = open_timestamp
        self.close_record: Optional[Record] = None
        self.close_timestamp: Optional[datetime] = None
        self.age = Decimal(0)
        self.elapsed: Optional[float] = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return not self._closed

    @property
    def timestamps(self) -> TimestampPair:
        return TimestampPair(self.open_timestamp, self.close_timestamp)

    def close(self, close_timestamp: Optional[datetime], close_record: Optional[Record] = None):
        """Record the second event and compute the elapsed time"""
        self.close_record = close_record
        self.close_timestamp = close_timestamp
        self.elapsed = self.timestamps.elapsed
        self._closed = True

    @property
    def first_record(self) -> Optional[Record]:
        return self.open_record

    @property
    def last_record(self) -> Optional[Record]:
        return self.close_record

    @property
    def oldest_record(self) -> Optional[Record]:
        """Event with the oldest timestamp, None when a timestamp is missing"""
        return self._record_at(self.timestamps.oldest_side)

    @property
    def newest_record(self) -> Optional[Record]:
        """Event with the newest timestamp, None when a timestamp is missing"""
        return self._record_at(self.timestamps.newest_side)

    def _record_at(self, side: Optional[Side]) -> Optional[Record]:
        if side is Side.OPEN:
            return self.open_record
        if side is Side.CLOSE:
            return self.close_record
        return None

    def records(self) -> List[Record]:
        """Stored events, in arrival order"""
        return [r for r in (self.open_record, self.close_record) if r is not None]

    def tag(self, name: str):
        for record in self.records():
            record.tag(name)

    def to_dict(self) -> Dict[str, Any]:
        """Diagnostic snapshot of the transaction"""
        return {
            "uid": self.uid,
            "open_timestamp": self.open_timestamp.isoformat() if self.open_timestamp else None,
            "close_timestamp": self.close_timestamp.isoformat() if self.close_timestamp else None,
            "age": float(self.age),
            "elapsed": self.elapsed,
            "open": self.is_open,
            "stored_events": len(self.records()),
        }


class CorrelationStore:
    """In-memory UID -> Transaction table"""

    def __init__(self):
        self._transactions: Dict[Hashable, Transaction] = {}

    def get(self, uid: Hashable) -> Optional[Transaction]:
        return self._transactions.get(uid)

    def __contains__(self, uid: Hashable) -> bool:
        return uid in self._transactions

    def __len__(self) -> int:
        return len(self._transactions)

    def open(
        self,
        uid: Hashable,
        open_timestamp: Optional[datetime],
        open_record: Optional[Record] = None,
    ) -> Transaction:
        """Start a new transaction for ``uid``

        Raises:
            KeyError: If a transaction is already open for ``uid``
        """
        if uid in self._transactions:
            raise KeyError(f"Transaction '{uid}' already open")

        transaction = Transaction(uid, open_timestamp, open_record)
        self._transactions[uid] = transaction
        return transaction

    def remove(self, uid: Hashable) -> Optional[Transaction]:
        return self._transactions.pop(uid, None)

    def increment_age_by(self, seconds: float):
        step = _exact(seconds)
        for transaction in self._transactions.values():
            transaction.age += step

    def remove_expired(self, timeout: float) -> List[Transaction]:
        """Remove and return every transaction whose age reached ``timeout``"""
        limit = _exact(timeout)
        expired = [t for t in self._transactions.values() if t.age >= limit]
        for transaction in expired:
            del self._transactions[transaction.uid]

        if expired:
            logger.debug("transactions_expired", count=len(expired), remaining=len(self._transactions))
        return expired

    def snapshot(self) -> Dict[Hashable, Transaction]:
        return dict(self._transactions)

    def clear(self):
        self._transactions.clear()


def _exact(seconds: float) -> Decimal:
    # decimal value as written, so repeated 0.1 ticks add up to exactly 1
    return Decimal(str(seconds))
