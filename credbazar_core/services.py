"""
Collector Services
==================
The process-lifetime container that owns all shared mutable state.

OTP records, the admission gate and the per-file ledger locks live on the
objects built here and are reached through this container, never through
module globals. Nothing in it is persisted across restarts.
"""

from dataclasses import dataclass
from typing import Optional

from .config import CollectorConfig
from .dispatch import AdmissionGate, NotificationDispatcher, Notifier, SMTPNotifier
from .ledger import LedgerManager, LedgerStorage
from .otp import HTTPOTPDelivery, LoggingOTPDelivery, OTPConfig, OTPDelivery, OTPVerifier
from .retry import exponential_backoff
from .scheduler import DailyLedgerScheduler
from .submissions import SubmissionAcceptor


@dataclass
class CollectorServices:
    config: CollectorConfig
    verifier: OTPVerifier
    ledger: LedgerManager
    dispatcher: NotificationDispatcher
    acceptor: SubmissionAcceptor
    scheduler: DailyLedgerScheduler

    async def close(self) -> None:
        self.scheduler.shutdown()
        await self.verifier.delivery.close()


def build_services(
    config: CollectorConfig,
    notifier: Optional[Notifier] = None,
    otp_delivery: Optional[OTPDelivery] = None,
) -> CollectorServices:
    """Wire the collector from configuration; collaborators can be swapped in."""
    if otp_delivery is None:
        if config.otp_api_key:
            otp_delivery = HTTPOTPDelivery(config.otp_api_url, config.otp_api_key)
        else:
            otp_delivery = LoggingOTPDelivery()

    verifier = OTPVerifier(
        OTPConfig(
            length=config.otp_length,
            expiry_seconds=config.otp_expiry_seconds,
            resend_cooldown_seconds=config.otp_resend_cooldown_seconds,
            max_attempts=config.otp_max_attempts,
        ),
        delivery=otp_delivery,
    )

    config.data_dir.mkdir(parents=True, exist_ok=True)
    ledger = LedgerManager(LedgerStorage(config.data_dir, config.ledger_extension))

    dispatcher = NotificationDispatcher(
        ledger=ledger,
        notifier=notifier or SMTPNotifier.from_config(config),
        sender=config.sender,
        recipient=config.recipient,
        gate=AdmissionGate(config.email_concurrency),
        max_attempts=config.email_retries,
        backoff=exponential_backoff(base_delay=config.email_backoff_base),
    )

    scheduler = DailyLedgerScheduler(
        dispatcher,
        hour=config.daily_send_hour,
        minute=config.daily_send_minute,
        timezone=config.timezone,
    )

    acceptor = SubmissionAcceptor(
        verifier=verifier,
        ledger=ledger,
        dispatcher=dispatcher,
        today=scheduler.today,
    )

    return CollectorServices(
        config=config,
        verifier=verifier,
        ledger=ledger,
        dispatcher=dispatcher,
        acceptor=acceptor,
        scheduler=scheduler,
    )
