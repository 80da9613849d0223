"""
Notification Dispatcher
=======================
Delivers a day's ledger to the operator under a global concurrency cap.
"""

import asyncio
from datetime import date
from typing import Awaitable, Callable, Optional

import structlog

from ..errors import ConfigurationError, NotificationFailed
from ..ledger import LedgerManager
from ..metrics import NOTIFICATION_ATTEMPTS, NOTIFICATIONS
from ..retry import BackoffFn, RetryExhausted, exponential_backoff, retry_with_backoff
from .gate import AdmissionGate
from .models import DispatchResult, DispatchStatus, Message, build_ledger_message
from .notifier import Notifier

logger = structlog.get_logger(__name__)


class NotificationDispatcher:
    """
    Turns "deliver the ledger for day D" into a reliable send.

    Every send holds an :class:`AdmissionGate` slot for its whole retry
    sequence, backoff sleeps included, and gives it back whatever the
    outcome. Delivery problems never raise out of :meth:`dispatch_ledger`;
    they come back as a ``FAILED`` result.

    There is no send timeout here: a transport call that never returns keeps
    its slot. Transports are expected to enforce their own timeouts.
    """

    def __init__(
        self,
        ledger: LedgerManager,
        notifier: Notifier,
        sender: Optional[str],
        recipient: Optional[str],
        gate: Optional[AdmissionGate] = None,
        max_attempts: int = 3,
        backoff: Optional[BackoffFn] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.ledger = ledger
        self.notifier = notifier
        self.sender = sender
        self.recipient = recipient
        self.gate = gate or AdmissionGate()
        self.max_attempts = max_attempts
        self.backoff = backoff or exponential_backoff(base_delay=1.0)
        self._sleep = sleep

    async def dispatch_ledger(self, day: date) -> DispatchResult:
        """
        Send the ledger for ``day`` to the configured recipient.

        Returns:
            ``NO_FILE`` without touching the transport when there is no
            ledger for the day, otherwise ``DELIVERED`` or ``FAILED``
        """
        if not self.ledger.exists(day):
            NOTIFICATIONS.labels(outcome=DispatchStatus.NO_FILE.value).inc()
            logger.info("ledger_dispatch_no_file", date=day.isoformat())
            return DispatchResult(status=DispatchStatus.NO_FILE)

        path = self.ledger.path_for(day)
        try:
            self.notifier.validate()
            if not self.sender or not self.recipient:
                raise ConfigurationError("Notification sender or recipient missing")
        except ConfigurationError as e:
            NOTIFICATIONS.labels(outcome=DispatchStatus.FAILED.value).inc()
            logger.error("ledger_dispatch_misconfigured", file=path.name, error=str(e))
            return DispatchResult(status=DispatchStatus.FAILED, file=path.name, error=e)

        message = build_ledger_message(path, day, self.sender, self.recipient)
        result = await self.send(message)
        result.file = path.name
        return result

    async def send(self, message: Message) -> DispatchResult:
        """Send ``message`` through the admission gate with retry and backoff."""
        attempts = 0

        async def attempt() -> None:
            nonlocal attempts
            attempts += 1
            try:
                await self.notifier.send(message)
            except Exception:
                NOTIFICATION_ATTEMPTS.labels(outcome="failed").inc()
                raise
            NOTIFICATION_ATTEMPTS.labels(outcome="success").inc()

        async with self.gate:
            try:
                await retry_with_backoff(
                    attempt,
                    max_attempts=self.max_attempts,
                    backoff=self.backoff,
                    sleep=self._sleep,
                )
            except RetryExhausted as e:
                NOTIFICATIONS.labels(outcome=DispatchStatus.FAILED.value).inc()
                logger.error(
                    "notification_failed",
                    subject=message.subject,
                    attempts=attempts,
                    error=str(e.last_exception),
                )
                return DispatchResult(
                    status=DispatchStatus.FAILED,
                    attempts=attempts,
                    error=NotificationFailed(e.last_exception),
                )

        NOTIFICATIONS.labels(outcome=DispatchStatus.DELIVERED.value).inc()
        logger.info("notification_delivered", subject=message.subject, attempts=attempts)
        return DispatchResult(status=DispatchStatus.DELIVERED, attempts=attempts)
