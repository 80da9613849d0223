"""
OTP Models
==========
Data models for one-time passcode issuance and verification.
"""

from dataclasses import dataclass


@dataclass
class OTPConfig:
    """Configuration for OTP issuance and verification."""
    length: int = 6
    expiry_seconds: int = 600  # 10 minutes
    resend_cooldown_seconds: int = 120  # Min time between codes
    max_attempts: int = 3


@dataclass
class OTPRecord:
    """The live passcode state for one identifier."""
    code_hash: str
    salt: str
    issued_at: float
    attempt_count: int = 0
    verified: bool = False

    def age(self, now: float) -> float:
        return now - self.issued_at

    def is_expired(self, now: float, expiry_seconds: int) -> bool:
        return self.age(now) > expiry_seconds


@dataclass
class IssuedOTP:
    """Result of a successful issuance."""
    code: str
    masked_identifier: str
    expires_in: int
