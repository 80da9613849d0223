"""
Submission Acceptor
===================
Gate check, normalize, append, then notify.
"""

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

import structlog

from .dispatch import DispatchResult, DispatchStatus, NotificationDispatcher
from .errors import NotVerified
from .ledger import LedgerManager
from .otp import OTPVerifier
from .records import mask_identifier, normalize_record

logger = structlog.get_logger(__name__)


@dataclass
class SubmissionResult:
    """An accepted submission and how the follow-up notification went."""
    file: Path
    dispatch: DispatchResult

    @property
    def emailed(self) -> bool:
        return self.dispatch.ok

    @property
    def email_error(self) -> Optional[str]:
        return None if self.dispatch.ok else self.dispatch.error_message


class SubmissionAcceptor:
    """
    Orchestrates one accepted submission.

    The verified OTP state is consumed before anything is written, so the
    same verification cannot back two submissions. A ledger failure
    propagates to the caller; a notification failure does not undo the
    append and is reported on the result instead.
    """

    def __init__(
        self,
        verifier: OTPVerifier,
        ledger: LedgerManager,
        dispatcher: NotificationDispatcher,
        normalizer: Callable[[Mapping[str, Any]], Dict[str, Any]] = normalize_record,
        today: Callable[[], date] = date.today,
    ):
        self.verifier = verifier
        self.ledger = ledger
        self.dispatcher = dispatcher
        self.normalizer = normalizer
        self.today = today

    async def accept(
        self,
        identifier: str,
        fields: Mapping[str, Any],
        day: Optional[date] = None,
    ) -> SubmissionResult:
        """
        Accept ``fields`` on behalf of a verified ``identifier``.

        Raises:
            NotVerified: If the identifier holds no live verified OTP
            LedgerWriteFailed: If the ledger append failed. The verification
                is consumed before the append, so the caller must verify a
                fresh OTP before retrying.
        """
        if not identifier or not await self.verifier.consume(identifier):
            logger.warning("submission_not_verified", identifier=mask_identifier(identifier or ""))
            raise NotVerified()

        day = day or self.today()
        record = self.normalizer(fields)
        path = await self.ledger.append(day, record)

        logger.info(
            "submission_accepted",
            identifier=mask_identifier(identifier),
            file=path.name,
            fields=len(record),
        )

        try:
            dispatch = await self.dispatcher.dispatch_ledger(day)
        except Exception as e:
            logger.exception("submission_dispatch_crashed", file=path.name)
            dispatch = DispatchResult(status=DispatchStatus.FAILED, file=path.name, error=e)

        if not dispatch.ok:
            logger.warning(
                "submission_dispatch_failed",
                file=path.name,
                error=dispatch.error_message,
            )

        return SubmissionResult(file=path, dispatch=dispatch)
