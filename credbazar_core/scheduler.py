"""
Daily Ledger Scheduler
======================
Fires the ledger notification once a day at a fixed wall-clock time.
"""

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from .dispatch import DispatchResult, NotificationDispatcher

logger = structlog.get_logger(__name__)

JOB_ID = "daily-ledger-dispatch"


class DailyLedgerScheduler:
    """
    Cron-style trigger for :meth:`NotificationDispatcher.dispatch_ledger`.

    There is no caller to report to, so every outcome, failures included,
    ends up in the log only.
    """

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        hour: int = 23,
        minute: int = 59,
        timezone: Optional[str] = None,
    ):
        self.dispatcher = dispatcher
        self.hour = hour
        self.minute = minute
        self.tz = ZoneInfo(timezone) if timezone else None
        self._scheduler: Optional[AsyncIOScheduler] = None

    def today(self) -> date:
        return datetime.now(self.tz).date()

    async def run_once(self) -> Optional[DispatchResult]:
        """Dispatch today's ledger, logging instead of raising."""
        day = self.today()
        logger.info("scheduled_dispatch_started", date=day.isoformat())
        try:
            result = await self.dispatcher.dispatch_ledger(day)
        except Exception:
            logger.exception("scheduled_dispatch_crashed", date=day.isoformat())
            return None

        if result.ok:
            logger.info("scheduled_dispatch_delivered", date=day.isoformat(), file=result.file)
        else:
            logger.warning(
                "scheduled_dispatch_not_delivered",
                date=day.isoformat(),
                status=result.status.value,
                error=result.error_message,
            )
        return result

    def start(self) -> None:
        if self._scheduler is not None:
            return
        trigger_kwargs = {"hour": self.hour, "minute": self.minute}
        if self.tz is not None:
            trigger_kwargs["timezone"] = self.tz
        scheduler = AsyncIOScheduler()
        scheduler.add_job(
            self.run_once,
            CronTrigger(**trigger_kwargs),
            id=JOB_ID,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("daily_dispatch_scheduled", hour=self.hour, minute=self.minute)

    def shutdown(self) -> None:
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
