"""
OTP Codes
=========
Code generation and salted digests for stored passcodes.

Plain codes never sit in the verifier's table; only an HMAC-SHA256 digest
keyed by a per-record salt does.
"""

import hashlib
import hmac
import secrets


def generate_otp(length: int = 6) -> str:
    """
    Draw a numeric code of exactly ``length`` digits.

    Codes are uniform over ``[10**(length-1), 10**length - 1]``, so the
    first digit is never zero and no padding is needed.
    """
    if length < 1:
        raise ValueError("OTP length must be at least 1")
    floor = 10 ** (length - 1)
    return str(floor + secrets.randbelow(9 * floor))


def generate_salt() -> str:
    return secrets.token_hex(16)


def hash_otp(otp: str, salt: str) -> str:
    """Hex digest of ``otp`` keyed by ``salt``."""
    return hmac.new(salt.encode(), otp.encode(), hashlib.sha256).hexdigest()


def verify_otp_hash(otp: str, salt: str, stored_hash: str) -> bool:
    """Constant-time check of ``otp`` against a stored digest."""
    return hmac.compare_digest(hash_otp(otp, salt), stored_hash)
