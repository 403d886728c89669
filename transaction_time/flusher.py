"""Periodic flush loop owned by the host

The filter has no timer of its own. Hosts without a scheduler can run a
``PeriodicFlusher`` task next to their pipeline to call ``flush`` every
``flush_interval`` seconds.
"""
import asyncio
import inspect
from typing import Awaitable, Callable, List, Optional, Union

import structlog

from transaction_time.engine import TransactionTimeFilter
from transaction_time.events import Record

logger = structlog.get_logger()

ExpiredCallback = Callable[[List[Record]], Union[None, Awaitable[None]]]


class PeriodicFlusher:
    """Calls ``TransactionTimeFilter.flush`` on a fixed interval"""

    def __init__(
        self,
        transaction_filter: TransactionTimeFilter,
        on_expired: Optional[ExpiredCallback] = None,
        interval: Optional[float] = None,
    ):
        self.transaction_filter = transaction_filter
        self.on_expired = on_expired
        self.interval = interval or transaction_filter.settings.flush_interval
        self.flush_count = 0
        self.running = False

    async def flush_once(self) -> List[Record]:
        """Run one flush and hand released events to the callback"""
        released = self.transaction_filter.flush(self.interval)
        self.flush_count += 1

        if released and self.on_expired is not None:
            result = self.on_expired(released)
            if inspect.isawaitable(result):
                await result
        return released

    async def run(self):
        """Flush loop, returns after ``stop`` is called"""
        if not self.transaction_filter.settings.periodic_flush:
            logger.info("periodic_flush_disabled")
            return

        self.running = True
        logger.info("periodic_flush_started", interval=self.interval)

        while self.running:
            await asyncio.sleep(self.interval)
            if not self.running:
                break
            try:
                await self.flush_once()
            except Exception as e:
                logger.exception("periodic_flush_error", error=str(e))

        logger.info("periodic_flush_stopped", flush_count=self.flush_count)

    def stop(self):
        self.running = False
