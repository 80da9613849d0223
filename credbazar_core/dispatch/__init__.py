"""
Notification Dispatch
=====================
Bounded-concurrency, retrying delivery of daily ledgers.
"""

from .models import (
    Attachment,
    Message,
    DispatchStatus,
    DispatchResult,
    build_ledger_message,
)
from .gate import AdmissionGate
from .notifier import Notifier, SMTPNotifier, build_email
from .dispatcher import NotificationDispatcher

__all__ = [
    # Models
    "Attachment",
    "Message",
    "DispatchStatus",
    "DispatchResult",
    "build_ledger_message",
    # Gate
    "AdmissionGate",
    # Notifiers
    "Notifier",
    "SMTPNotifier",
    "build_email",
    # Dispatcher
    "NotificationDispatcher",
]
