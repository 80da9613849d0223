"""
Collector Errors
================
Typed failures for OTP gating, ledger storage and notification delivery.

Every error carries a stable ``code`` and the HTTP status the inbound
surface answers with.
"""

from typing import Optional


class CollectorError(Exception):
    """Base class for all collector failures."""
    code = "COLLECTOR_ERROR"
    status_code = 500

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


# Validation

class ValidationError(CollectorError):
    """Malformed input."""
    code = "VALIDATION_ERROR"
    status_code = 400


class InvalidIdentifier(ValidationError):
    """Invalid mobile number"""
    code = "INVALID_IDENTIFIER"


class InvalidCode(ValidationError):
    """Mobile and OTP required"""
    code = "INVALID_CODE"


# Rate limiting

class RateLimited(CollectorError):
    """Too many requests."""
    code = "RATE_LIMITED"
    status_code = 429

    def __init__(self, remaining_seconds: int, message: Optional[str] = None):
        self.remaining_seconds = remaining_seconds
        super().__init__(message or f"Please wait {remaining_seconds} seconds before retrying")


class Cooldown(RateLimited):
    """A code was issued too recently for this identifier."""
    code = "OTP_COOLDOWN"

    def __init__(self, remaining_seconds: int):
        super().__init__(
            remaining_seconds,
            f"Please wait {remaining_seconds} seconds before requesting a new OTP",
        )


# Authentication

class AuthError(CollectorError):
    """OTP check failed; the issue/verify flow must be restarted."""
    code = "AUTH_ERROR"
    status_code = 400


class OTPNotFound(AuthError):
    """OTP expired or not sent"""
    code = "OTP_NOT_FOUND"


class OTPExpired(OTPNotFound):
    """OTP expired"""
    code = "OTP_EXPIRED"


class TooManyAttempts(AuthError):
    """Too many attempts. Request new OTP"""
    code = "OTP_TOO_MANY_ATTEMPTS"


class OTPMismatch(AuthError):
    """Invalid OTP"""
    code = "OTP_MISMATCH"

    def __init__(self, attempts_remaining: int):
        self.attempts_remaining = attempts_remaining
        super().__init__("Invalid OTP")


class OTPAlreadyUsed(AuthError):
    """OTP already used"""
    code = "OTP_ALREADY_USED"


class NotVerified(AuthError):
    """Mobile number not verified. Please verify OTP first."""
    code = "NOT_VERIFIED"


# Storage

class StorageError(CollectorError):
    """Ledger storage failure."""
    code = "STORAGE_ERROR"
    status_code = 500


class LedgerWriteFailed(StorageError):
    """Ledger append did not happen."""
    code = "LEDGER_WRITE_FAILED"

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write ledger {path}: {cause}")


# Delivery

class DeliveryError(CollectorError):
    """Outbound delivery failure."""
    code = "DELIVERY_ERROR"
    status_code = 500


class OTPDeliveryFailed(DeliveryError):
    """Failed to send OTP"""
    code = "OTP_DELIVERY_FAILED"


class NotificationFailed(DeliveryError):
    """Notification could not be delivered after all retries."""
    code = "NOTIFICATION_FAILED"

    def __init__(self, last_error: Optional[BaseException] = None):
        self.last_error = last_error
        super().__init__(f"Failed to send notification: {last_error}")


class Forbidden(CollectorError):
    """Forbidden"""
    code = "FORBIDDEN"
    status_code = 403


class ConfigurationError(CollectorError):
    """Required configuration is missing."""
    code = "CONFIG_ERROR"
    status_code = 500
