"""
API Schemas
===========
Request and response bodies for the inbound trigger surface.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, field_validator


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


class SendOTPRequest(BaseModel):
    mobile: str = ""

    @field_validator("mobile", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return _as_text(value)


class VerifyOTPRequest(BaseModel):
    mobile: str = ""
    otp: str = ""

    @field_validator("mobile", "otp", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return _as_text(value)


class SendOTPResponse(BaseModel):
    ok: bool = True
    message: str = "OTP sent successfully"
    mobile: str


class VerifyOTPResponse(BaseModel):
    ok: bool = True
    message: str = "OTP verified successfully"


class SubmissionResponse(BaseModel):
    ok: bool = True
    file: str
    email: bool
    emailError: Optional[str] = None


class DispatchResponse(BaseModel):
    ok: bool
    status: str
    file: Optional[str] = None
    attempts: int = 0
    error: Optional[str] = None


class RepairEntry(BaseModel):
    file: str
    repaired: Optional[bool] = None
    error: Optional[str] = None


class RepairResponse(BaseModel):
    ok: bool = True
    results: List[RepairEntry]
