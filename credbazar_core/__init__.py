"""
CredBazar Form Collector
========================
OTP-gated form intake that appends submissions to a daily ledger and mails
the day's file to an operator.
"""

__version__ = "1.0.0"

# Configuration
from credbazar_core.config import CollectorConfig

# Errors
from credbazar_core.errors import (
    CollectorError,
    ValidationError,
    InvalidIdentifier,
    InvalidCode,
    RateLimited,
    Cooldown,
    AuthError,
    OTPNotFound,
    OTPExpired,
    TooManyAttempts,
    OTPMismatch,
    OTPAlreadyUsed,
    NotVerified,
    StorageError,
    LedgerWriteFailed,
    DeliveryError,
    OTPDeliveryFailed,
    NotificationFailed,
    Forbidden,
    ConfigurationError,
)

# Logging
from credbazar_core.logging_config import setup_logging

# OTP
from credbazar_core.otp import OTPConfig, OTPVerifier, IssuedOTP

# Records
from credbazar_core.records import FIELD_MAP, normalize_record, mask_identifier

# Ledger
from credbazar_core.ledger import LedgerManager, LedgerStorage, RepairResult

# Retry
from credbazar_core.retry import retry_with_backoff, exponential_backoff, RetryExhausted

# Dispatch
from credbazar_core.dispatch import (
    AdmissionGate,
    DispatchResult,
    DispatchStatus,
    NotificationDispatcher,
    SMTPNotifier,
)

# Orchestration
from credbazar_core.submissions import SubmissionAcceptor, SubmissionResult
from credbazar_core.scheduler import DailyLedgerScheduler
from credbazar_core.services import CollectorServices, build_services

__all__ = [
    "__version__",
    # Configuration
    "CollectorConfig",
    # Errors
    "CollectorError",
    "ValidationError",
    "InvalidIdentifier",
    "InvalidCode",
    "RateLimited",
    "Cooldown",
    "AuthError",
    "OTPNotFound",
    "OTPExpired",
    "TooManyAttempts",
    "OTPMismatch",
    "OTPAlreadyUsed",
    "NotVerified",
    "StorageError",
    "LedgerWriteFailed",
    "DeliveryError",
    "OTPDeliveryFailed",
    "NotificationFailed",
    "Forbidden",
    "ConfigurationError",
    # Logging
    "setup_logging",
    # OTP
    "OTPConfig",
    "OTPVerifier",
    "IssuedOTP",
    # Records
    "FIELD_MAP",
    "normalize_record",
    "mask_identifier",
    # Ledger
    "LedgerManager",
    "LedgerStorage",
    "RepairResult",
    # Retry
    "retry_with_backoff",
    "exponential_backoff",
    "RetryExhausted",
    # Dispatch
    "AdmissionGate",
    "DispatchResult",
    "DispatchStatus",
    "NotificationDispatcher",
    "SMTPNotifier",
    # Orchestration
    "SubmissionAcceptor",
    "SubmissionResult",
    "DailyLedgerScheduler",
    "CollectorServices",
    "build_services",
]
