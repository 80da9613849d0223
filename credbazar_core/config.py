"""
Collector Configuration
=======================
Runtime configuration for the form collector, read from the environment.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value not in (None, "") else default


@dataclass
class CollectorConfig:
    """Configuration for OTP gating, ledger storage and notification."""
    service_name: str = "credbazar-collector"

    # Ledger storage
    data_dir: Path = Path("data")
    ledger_extension: str = "csv"

    # OTP
    otp_length: int = 6
    otp_expiry_seconds: int = 600  # 10 minutes
    otp_resend_cooldown_seconds: int = 120  # 2 minutes
    otp_max_attempts: int = 3
    otp_api_url: str = "https://api.example-otp.com/send"
    otp_api_key: Optional[str] = None

    # SMTP
    smtp_host: Optional[str] = None
    smtp_port: int = 465
    smtp_secure: bool = True
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_timeout: float = 30.0
    notify_to: Optional[str] = None
    from_email: Optional[str] = None

    # Dispatch
    email_concurrency: int = 2
    email_retries: int = 3
    email_backoff_base: float = 1.0

    # Triggers
    send_trigger_key: Optional[str] = None
    daily_send_hour: int = 23
    daily_send_minute: int = 59
    enable_scheduler: bool = True
    timezone: Optional[str] = None

    # HTTP surface
    port: int = 3000
    rate_limit_per_minute: int = 60
    trust_proxy: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    @property
    def recipient(self) -> Optional[str]:
        return self.notify_to or self.smtp_user

    @property
    def sender(self) -> Optional[str]:
        return self.from_email or self.smtp_user

    @classmethod
    def from_env(cls) -> "CollectorConfig":
        """Build a config from environment variables, falling back to defaults."""
        smtp_port = _env_int("SMTP_PORT", 465)
        cors = os.environ.get("CORS_ORIGINS", "*")

        return cls(
            service_name=os.environ.get("SERVICE_NAME", "credbazar-collector"),
            data_dir=Path(os.environ.get("DATA_DIR", "data")),
            ledger_extension=os.environ.get("LEDGER_EXTENSION", "csv"),
            otp_length=_env_int("OTP_LENGTH", 6),
            otp_expiry_seconds=_env_int("OTP_EXPIRY_SECONDS", 600),
            otp_resend_cooldown_seconds=_env_int("OTP_RESEND_COOLDOWN_SECONDS", 120),
            otp_max_attempts=_env_int("OTP_MAX_ATTEMPTS", 3),
            otp_api_url=os.environ.get("OTP_API_URL", "https://api.example-otp.com/send"),
            otp_api_key=os.environ.get("OTP_API_KEY") or None,
            smtp_host=os.environ.get("SMTP_HOST") or None,
            smtp_port=smtp_port,
            smtp_secure=_env_bool("SMTP_SECURE", False) or smtp_port == 465,
            smtp_user=os.environ.get("SMTP_USER") or None,
            smtp_password=os.environ.get("SMTP_PASS") or None,
            smtp_timeout=float(os.environ.get("SMTP_TIMEOUT", "30")),
            notify_to=os.environ.get("NOTIFY_TO") or None,
            from_email=os.environ.get("FROM_EMAIL") or None,
            email_concurrency=_env_int("EMAIL_CONCURRENCY", 2),
            email_retries=_env_int("EMAIL_RETRIES", 3),
            email_backoff_base=float(os.environ.get("EMAIL_BACKOFF_BASE", "1.0")),
            send_trigger_key=os.environ.get("SEND_TRIGGER_KEY") or None,
            daily_send_hour=_env_int("DAILY_SEND_HOUR", 23),
            daily_send_minute=_env_int("DAILY_SEND_MINUTE", 59),
            enable_scheduler=_env_bool("ENABLE_SCHEDULER", True),
            timezone=os.environ.get("TIMEZONE") or None,
            port=_env_int("PORT", 3000),
            rate_limit_per_minute=_env_int("RATE_LIMIT_PER_MINUTE", 60),
            trust_proxy=_env_bool("TRUST_PROXY", False),
            cors_origins=[o.strip() for o in cors.split(",") if o.strip()],
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            log_json=_env_bool("LOG_JSON", True),
        )
