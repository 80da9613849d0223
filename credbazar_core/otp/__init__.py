"""
OTP Issuance and Verification
=============================
Short-lived passcodes that gate who may submit.
"""

from .models import OTPConfig, OTPRecord, IssuedOTP
from .hashing import generate_otp, hash_otp, verify_otp_hash, generate_salt
from .delivery import OTPDelivery, LoggingOTPDelivery, HTTPOTPDelivery
from .verifier import OTPVerifier

__all__ = [
    # Models
    "OTPConfig",
    "OTPRecord",
    "IssuedOTP",
    # Hashing
    "generate_otp",
    "hash_otp",
    "verify_otp_hash",
    "generate_salt",
    # Delivery
    "OTPDelivery",
    "LoggingOTPDelivery",
    "HTTPOTPDelivery",
    # Verifier
    "OTPVerifier",
]
