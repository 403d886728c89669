"""Transaction time filter - pairs events by UID and measures the time between them

Events of a transaction may arrive in any order (multiple pipeline workers),
so the elapsed time is computed from the event timestamps rather than from
arrival. The host calls ``filter`` for every event and ``flush`` on its own
periodic schedule; the filter never starts a timer itself.
"""
import threading
from dataclasses import dataclass
from typing import Dict, Hashable, Iterator, List, Optional

import structlog

from transaction_time.builder import TransactionEventBuilder
from transaction_time.config import TransactionTimeSettings
from transaction_time.constants import TRANSACTION_TIME_EXPIRED_TAG, TRANSACTION_TIME_TAG
from transaction_time.events import Record
from transaction_time.metrics import (
    EVENTS_PROCESSED,
    OPEN_TRANSACTIONS,
    TRANSACTION_DURATION,
    TRANSACTIONS_EXPIRED,
)
from transaction_time.store import CorrelationStore, Transaction
from transaction_time.timestamps import resolve_timestamp

logger = structlog.get_logger()


@dataclass
class FilterResult:
    """Output of one ``filter`` call

    Iterating yields the generated transaction event (if any) followed by
    the original event.
    """
    event: Record
    transaction_event: Optional[Record] = None

    @property
    def completed(self) -> bool:
        return self.transaction_event is not None

    def __iter__(self) -> Iterator[Record]:
        if self.transaction_event is not None:
            yield self.transaction_event
        yield self.event


class TransactionTimeFilter:
    """Pairs events sharing a UID and emits a TransactionTime event per pair"""

    def __init__(
        self,
        settings: TransactionTimeSettings,
        builder: Optional[TransactionEventBuilder] = None,
    ):
        self.settings = settings
        self.builder = builder or TransactionEventBuilder(settings)
        self.store = CorrelationStore()
        self._lock = threading.Lock()

        # Keep events only when attach_event or store_data needs them later
        self.store_event = settings.store_event
        self._ignore_uids = tuple(settings.ignore_uids)

        logger.info(
            "transaction_time_filter_registered",
            uid_field=settings.uid_field,
            timeout=settings.timeout,
            timestamp_tag=settings.timestamp_tag,
            attach_event=settings.attach_event.value,
            store_event=self.store_event,
        )

    @property
    def transactions(self) -> Dict[Hashable, Transaction]:
        """Snapshot of the open transactions"""
        with self._lock:
            return self.store.snapshot()

    @property
    def open_transactions(self) -> int:
        with self._lock:
            return len(self.store)

    def should_process(self, event: Record) -> bool:
        """Whether ``event`` takes part in a transaction"""
        return self._transaction_uid(event) is not None

    def _transaction_uid(self, event: Record) -> Optional[Hashable]:
        uid = event.get(self.settings.uid_field)
        if uid is None:
            return None

        tags = event.tags
        # Never process events created by this filter
        if TRANSACTION_TIME_TAG in tags or TRANSACTION_TIME_EXPIRED_TAG in tags:
            return None
        if self.settings.filter_tag is not None and self.settings.filter_tag not in tags:
            return None
        if uid in self._ignore_uids:
            return None

        try:
            hash(uid)
        except TypeError:
            logger.warning("transaction_uid_unhashable", uid_field=self.settings.uid_field, uid=repr(uid))
            return None
        return uid

    def filter(self, event: Record) -> FilterResult:
        """Process one event

        Opens a transaction for a new UID, or completes the open one and
        returns the generated TransactionTime event with the original event.
        The original event is always returned unchanged.
        """
        uid = self._transaction_uid(event)
        if uid is None:
            EVENTS_PROCESSED.labels(outcome="bypassed").inc()
            return FilterResult(event)

        timestamp = resolve_timestamp(event, self.settings.timestamp_tag)
        stored = event.clone() if self.store_event else None

        with self._lock:
            transaction = self.store.get(uid)
            if transaction is None:
                self.store.open(uid, timestamp, stored)
                EVENTS_PROCESSED.labels(outcome="opened").inc()
                OPEN_TRANSACTIONS.inc()
                logger.debug("transaction_opened", uid=uid)
                return FilterResult(event)

            # End of transaction
            transaction.close(timestamp, stored)
            transaction_event = self.builder.build(transaction)
            self.store.remove(uid)

        EVENTS_PROCESSED.labels(outcome="completed").inc()
        OPEN_TRANSACTIONS.dec()
        if transaction.elapsed is not None:
            TRANSACTION_DURATION.observe(transaction.elapsed)
        else:
            logger.debug("transaction_missing_timestamp", uid=uid, timestamp_tag=self.settings.timestamp_tag)
        logger.debug("transaction_completed", uid=uid, elapsed=transaction.elapsed)

        return FilterResult(event, transaction_event)

    def flush(self, interval: Optional[float] = None) -> List[Record]:
        """Age the open transactions and drop those reaching the timeout

        Meant to be called every ``flush_interval`` seconds by the host.
        Returns the stored events of the expired transactions, tagged
        TransactionTimeExpired, unless release_expired is disabled.
        """
        seconds = self.settings.flush_interval if interval is None else interval
        released: List[Record] = []

        with self._lock:
            self.store.increment_age_by(seconds)
            expired = self.store.remove_expired(self.settings.timeout)
            if self.settings.release_expired:
                for transaction in expired:
                    released.extend(self.builder.release(transaction))

        if expired:
            OPEN_TRANSACTIONS.dec(len(expired))
            TRANSACTIONS_EXPIRED.labels(released=str(self.settings.release_expired).lower()).inc(len(expired))
            logger.info(
                "transactions_flushed",
                expired=len(expired),
                released_events=len(released),
            )

        return released

    tick = flush

