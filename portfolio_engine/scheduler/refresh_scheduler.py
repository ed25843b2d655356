"""
AUTO REFRESH SCHEDULER

Drives HoldingsStore.refresh_prices on an interval.
Orchestration only; contains no valuation logic.
"""

import asyncio
import logging
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from portfolio_engine.domain.models import PortfolioSnapshot
from portfolio_engine.services.holdings_store import HoldingsStore

logger = logging.getLogger(__name__)

JOB_ID = "refresh_prices"


class RefreshScheduler:
    """
    Periodic price refresh for one store.

    The interval follows the store's view settings: when refresh_interval
    changes the job is rescheduled in place.
    """

    def __init__(self, store: HoldingsStore, scheduler: Optional[AsyncIOScheduler] = None):
        self.store = store
        self.scheduler = scheduler or AsyncIOScheduler(timezone="UTC")
        self._interval = store.settings.refresh_interval
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._started = False

    @property
    def interval(self) -> int:
        return self._interval

    @property
    def running(self) -> bool:
        return self._started and self.scheduler.running

    async def refresh_job(self) -> None:
        """Scheduled job body. Empty portfolios are skipped."""
        if not self.store.holdings:
            return
        report = await self.store.refresh_prices()
        if report.failed:
            logger.warning("⚠️ Auto refresh incomplete | failed=%s", ", ".join(sorted(report.failed)))

    def start(self) -> None:
        """Register the refresh job and start the scheduler. Needs a running loop."""
        if self._started:
            return
        logger.info("🚀 Starting auto refresh | every %ss", self._interval)
        self.scheduler.add_job(
            self.refresh_job,
            IntervalTrigger(seconds=self._interval),
            id=JOB_ID,
            name="Portfolio Price Refresh",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._unsubscribe = self.store.subscribe(self._on_snapshot)
        self.scheduler.start()
        self._started = True
        logger.info("✅ Auto refresh started")

    def _on_snapshot(self, snapshot: PortfolioSnapshot) -> None:
        interval = snapshot.settings.refresh_interval
        if interval == self._interval:
            return
        self._interval = interval
        if self._started:
            self.scheduler.reschedule_job(JOB_ID, trigger=IntervalTrigger(seconds=interval))
            logger.info("🔄 Auto refresh rescheduled | every %ss", interval)

    async def stop(self) -> None:
        """
        Stop the scheduler. AsyncIOScheduler shuts down through a loop
        callback, so yield once to let it run before returning.
        """
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if not self._started:
            return
        self._started = False
        logger.info("🛑 Stopping auto refresh...")
        self.scheduler.shutdown(wait=False)
        await asyncio.sleep(0)
        logger.info("✅ Auto refresh stopped")
