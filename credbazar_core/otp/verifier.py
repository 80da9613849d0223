"""
OTP Verifier
============
Issues, verifies and consumes one-time passcodes per identifier.

State lives in a process-local table owned by the verifier instance. Nothing
is persisted: a restart drops every outstanding code and users simply ask
for a new one.
"""

import asyncio
import math
import time
from typing import Callable, Dict, Optional

import structlog

from ..errors import (
    Cooldown,
    InvalidCode,
    InvalidIdentifier,
    OTPAlreadyUsed,
    OTPExpired,
    OTPMismatch,
    OTPNotFound,
    TooManyAttempts,
)
from ..metrics import OTP_ISSUED, OTP_VERIFICATIONS
from ..records.identifiers import mask_identifier, validate_identifier
from .delivery import LoggingOTPDelivery, OTPDelivery
from .hashing import generate_otp, generate_salt, hash_otp, verify_otp_hash
from .models import IssuedOTP, OTPConfig, OTPRecord

logger = structlog.get_logger(__name__)


class OTPVerifier:
    """
    Per-identifier OTP state machine.

    A record is dead once it is older than ``expiry_seconds``, and it is
    removed outright when its attempt counter reaches ``max_attempts`` or it
    is consumed. Dead records are treated exactly like missing ones.

    Malformed identifiers and codes are rejected before any record is read,
    so they never count against the attempt limit.

    Example:
        verifier = OTPVerifier(OTPConfig(), delivery=LoggingOTPDelivery())

        issued = await verifier.issue("9999999999")
        await verifier.verify("9999999999", issued.code)
        assert await verifier.consume("9999999999")
    """

    def __init__(
        self,
        config: Optional[OTPConfig] = None,
        delivery: Optional[OTPDelivery] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or OTPConfig()
        self.delivery = delivery or LoggingOTPDelivery()
        self._clock = clock
        self._records: Dict[str, OTPRecord] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def _cleanup(self, now: float) -> None:
        """Remove expired records."""
        dead = [
            identifier for identifier, record in self._records.items()
            if record.is_expired(now, self.config.expiry_seconds)
        ]
        for identifier in dead:
            del self._records[identifier]

    async def issue(self, identifier: str) -> IssuedOTP:
        """
        Mint a fresh code for ``identifier`` and hand it to the delivery channel.

        Any previous record for the identifier is replaced, including one that
        was already verified.

        Raises:
            InvalidIdentifier: If the identifier is not a 10-digit number
            Cooldown: If a live code was issued less than the cooldown ago
            OTPDeliveryFailed: If the delivery channel refused the code
        """
        if not validate_identifier(identifier):
            raise InvalidIdentifier()

        async with self._lock:
            now = self._clock()
            self._cleanup(now)

            existing = self._records.get(identifier)
            if existing is not None:
                elapsed = existing.age(now)
                cooldown = self.config.resend_cooldown_seconds
                if elapsed < cooldown:
                    remaining = math.ceil(cooldown - elapsed)
                    logger.info(
                        "otp_cooldown_active",
                        identifier=mask_identifier(identifier),
                        remaining_seconds=remaining,
                    )
                    raise Cooldown(remaining)

            code = generate_otp(self.config.length)
            salt = generate_salt()
            self._records[identifier] = OTPRecord(
                code_hash=hash_otp(code, salt),
                salt=salt,
                issued_at=now,
            )

        OTP_ISSUED.inc()
        logger.info(
            "otp_issued",
            identifier=mask_identifier(identifier),
            channel=self.delivery.name,
            expires_in=self.config.expiry_seconds,
        )

        # The record stays in place when delivery fails so the cooldown holds.
        await self.delivery.deliver(identifier, code)

        return IssuedOTP(
            code=code,
            masked_identifier=mask_identifier(identifier),
            expires_in=self.config.expiry_seconds,
        )

    async def verify(self, identifier: str, code: str) -> bool:
        """
        Check ``code`` against the live record for ``identifier``.

        On a match the record is flagged verified and kept so that a later
        :meth:`consume` can clear it.

        Returns:
            True when the code matched

        Raises:
            InvalidCode: If identifier or code is missing, or the code is not
                a numeric code of the configured length
            InvalidIdentifier: If the identifier is not a 10-digit number
            OTPNotFound: If no live record exists (``OTPExpired`` when it lapsed)
            TooManyAttempts: If the attempt limit is reached; the record is dropped
            OTPMismatch: If the code is wrong and attempts remain
            OTPAlreadyUsed: If the live code was already verified
        """
        if not identifier or not code:
            raise InvalidCode()
        if not validate_identifier(identifier):
            raise InvalidIdentifier()
        code = str(code).strip()
        if len(code) != self.config.length or not (code.isascii() and code.isdigit()):
            raise InvalidCode("Invalid OTP format")

        async with self._lock:
            now = self._clock()
            record = self._records.get(identifier)

            if record is None:
                OTP_VERIFICATIONS.labels(outcome="not_found").inc()
                raise OTPNotFound()

            if record.is_expired(now, self.config.expiry_seconds):
                del self._records[identifier]
                OTP_VERIFICATIONS.labels(outcome="expired").inc()
                logger.warning("otp_expired", identifier=mask_identifier(identifier))
                raise OTPExpired()

            if record.verified:
                OTP_VERIFICATIONS.labels(outcome="already_used").inc()
                raise OTPAlreadyUsed()

            if not verify_otp_hash(code, record.salt, record.code_hash):
                record.attempt_count += 1
                remaining = self.config.max_attempts - record.attempt_count
                logger.warning(
                    "otp_mismatch",
                    identifier=mask_identifier(identifier),
                    remaining=remaining,
                )
                # Dropped on reaching the limit, so a stored record always has attempts left.
                if remaining <= 0:
                    del self._records[identifier]
                    OTP_VERIFICATIONS.labels(outcome="too_many_attempts").inc()
                    raise TooManyAttempts()
                OTP_VERIFICATIONS.labels(outcome="mismatch").inc()
                raise OTPMismatch(remaining)

            record.verified = True

        OTP_VERIFICATIONS.labels(outcome="verified").inc()
        logger.info("otp_verified", identifier=mask_identifier(identifier))
        return True

    async def is_verified(self, identifier: str) -> bool:
        """Whether ``identifier`` holds a live, verified record."""
        async with self._lock:
            record = self._records.get(identifier)
            if record is None or record.is_expired(self._clock(), self.config.expiry_seconds):
                return False
            return record.verified

    async def consume(self, identifier: str) -> bool:
        """
        Remove the record for ``identifier`` and report whether it was verified.

        Called once, at the moment a submission is accepted, so a verified
        code cannot be replayed.
        """
        async with self._lock:
            record = self._records.pop(identifier, None)
            if record is None:
                return False
            if record.is_expired(self._clock(), self.config.expiry_seconds):
                return False
            return record.verified
