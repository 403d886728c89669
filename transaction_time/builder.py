"""
Builds the events emitted for completed and expired transactions
"""

import socket
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from transaction_time.config import AttachEvent, ReplaceTimestamp, TransactionTimeSettings
from transaction_time.constants import (
    HOST_FIELD,
    NEWEST_DATA_KEY,
    OLDEST_DATA_KEY,
    TIMESTAMP_START_FIELD,
    TRANSACTION_DATA_FIELD,
    TRANSACTION_TIME_EXPIRED_TAG,
    TRANSACTION_TIME_FIELD,
    TRANSACTION_TIME_TAG,
    TRANSACTION_UID_FIELD,
)
from transaction_time.events import TIMESTAMP_FIELD, Event, Record
from transaction_time.store import Transaction


class TransactionEventBuilder:
    """
    Turns a completed transaction into a new ``TransactionTime`` event

    The generated event is seeded from the stored event selected by
    ``attach_event`` (an empty event when none is selected or stored) and
    always carries the elapsed time, the UID, the oldest timestamp and the
    host name.
    """

    def __init__(
        self,
        settings: TransactionTimeSettings,
        hostname: Optional[str] = None,
        event_factory: Callable[[], Record] = Event,
    ):
        self.settings = settings
        self.hostname = hostname or socket.gethostname()
        self.event_factory = event_factory

    def build(self, transaction: Transaction) -> Record:
        pair = transaction.timestamps
        created_at = datetime.now(timezone.utc)

        transaction_event = self._base_event(transaction)
        transaction_event.set(HOST_FIELD, self.hostname)
        transaction_event.tag(TRANSACTION_TIME_TAG)
        transaction_event.set(TRANSACTION_TIME_FIELD, transaction.elapsed)
        transaction_event.set(TRANSACTION_UID_FIELD, transaction.uid)
        transaction_event.set(TIMESTAMP_START_FIELD, pair.oldest)

        if self.settings.attach_data:
            transaction_event.set(TRANSACTION_DATA_FIELD, self.transaction_data(transaction))

        timestamp = created_at
        if self.settings.replace_timestamp is ReplaceTimestamp.OLDEST and pair.valid:
            timestamp = pair.oldest
        elif self.settings.replace_timestamp is ReplaceTimestamp.NEWEST and pair.valid:
            timestamp = pair.newest
        transaction_event.set(TIMESTAMP_FIELD, timestamp)

        return transaction_event

    def transaction_data(self, transaction: Transaction) -> Dict[str, Dict[str, Any]]:
        """Fields copied from the oldest/newest events, keyed by bucket"""
        data = {}
        if self.settings.store_data_oldest:
            data[OLDEST_DATA_KEY] = _copy_fields(transaction.oldest_record, self.settings.store_data_oldest)
        if self.settings.store_data_newest:
            data[NEWEST_DATA_KEY] = _copy_fields(transaction.newest_record, self.settings.store_data_newest)
        return data

    def release(self, transaction: Transaction) -> List[Record]:
        """Tag the stored events of an expired transaction for release"""
        transaction.tag(TRANSACTION_TIME_EXPIRED_TAG)
        return transaction.records()

    def _base_event(self, transaction: Transaction) -> Record:
        selected = {
            AttachEvent.FIRST: transaction.first_record,
            AttachEvent.LAST: transaction.last_record,
            AttachEvent.OLDEST: transaction.oldest_record,
            AttachEvent.NEWEST: transaction.newest_record,
        }.get(self.settings.attach_event)

        if selected is None:
            return self.event_factory()
        # the stored event also feeds transaction_data and must stay untouched
        return selected.clone()


def _copy_fields(record: Optional[Record], fields: Sequence[str]) -> Dict[str, Any]:
    # missing fields, or a missing record, are stored as None
    return {field: record.get(field) if record is not None else None for field in fields}
