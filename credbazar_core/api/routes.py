"""
Collector Routes
================
The inbound trigger surface: OTP issue/verify, form submission, manual
dispatch and ledger repair.
"""

import hmac
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Header, Request
from fastapi.responses import PlainTextResponse
import structlog

from .. import __version__
from ..errors import Forbidden
from ..services import CollectorServices
from .schemas import (
    DispatchResponse,
    RepairEntry,
    RepairResponse,
    SendOTPRequest,
    SendOTPResponse,
    SubmissionResponse,
    VerifyOTPRequest,
    VerifyOTPResponse,
)

logger = structlog.get_logger(__name__)

BANNER = "CredBazar form collector running"

router = APIRouter()


def get_services(request: Request) -> CollectorServices:
    return request.app.state.services


def require_send_key(
    services: CollectorServices = Depends(get_services),
    x_send_key: Optional[str] = Header(default=None),
) -> None:
    """Guard for operator endpoints; open when no trigger key is configured."""
    expected = services.config.send_trigger_key
    if not expected:
        return
    if not x_send_key or not hmac.compare_digest(x_send_key, expected):
        logger.warning("send_key_rejected")
        raise Forbidden()


@router.get("/", response_class=PlainTextResponse)
async def index() -> str:
    return BANNER


@router.get("/health")
async def health(services: CollectorServices = Depends(get_services)) -> Dict[str, Any]:
    return {
        "ok": True,
        "status": "healthy",
        "service": services.config.service_name,
        "version": __version__,
        "ledger_dir": services.ledger.storage.root.is_dir(),
    }


@router.post("/send-otp", response_model=SendOTPResponse)
async def send_otp(
    body: SendOTPRequest,
    services: CollectorServices = Depends(get_services),
) -> SendOTPResponse:
    issued = await services.verifier.issue(body.mobile)
    return SendOTPResponse(mobile=issued.masked_identifier)


@router.post("/verify-otp", response_model=VerifyOTPResponse)
async def verify_otp(
    body: VerifyOTPRequest,
    services: CollectorServices = Depends(get_services),
) -> VerifyOTPResponse:
    await services.verifier.verify(body.mobile, body.otp)
    return VerifyOTPResponse()


@router.post("/submit-loan", response_model=SubmissionResponse)
async def submit_loan(
    fields: Dict[str, Any] = Body(...),
    services: CollectorServices = Depends(get_services),
) -> SubmissionResponse:
    mobile = fields.get("mobile")
    identifier = str(mobile).strip() if mobile is not None else ""
    result = await services.acceptor.accept(identifier, fields)
    return SubmissionResponse(
        file=result.file.name,
        email=result.emailed,
        emailError=result.email_error,
    )


@router.post(
    "/send-today",
    response_model=DispatchResponse,
    dependencies=[Depends(require_send_key)],
)
async def send_today(services: CollectorServices = Depends(get_services)) -> DispatchResponse:
    day = services.scheduler.today()
    result = await services.dispatcher.dispatch_ledger(day)
    return DispatchResponse(
        ok=result.ok,
        status=result.status.value,
        file=result.file,
        attempts=result.attempts,
        error=result.error_message,
    )


@router.post(
    "/repair-ledgers",
    response_model=RepairResponse,
    dependencies=[Depends(require_send_key)],
)
async def repair_ledgers(services: CollectorServices = Depends(get_services)) -> RepairResponse:
    results = await services.ledger.repair_all()
    return RepairResponse(
        results=[
            RepairEntry(file=r.file, repaired=r.repaired, error=r.error)
            for r in results
        ]
    )
