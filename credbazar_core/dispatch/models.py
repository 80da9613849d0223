"""
Dispatch Models
===============
Outbound messages and dispatch outcomes.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import List, Optional


@dataclass
class Attachment:
    filename: str
    path: Path


@dataclass
class Message:
    """An outbound notification."""
    sender: str
    to: str
    subject: str
    body_text: str
    attachments: List[Attachment] = field(default_factory=list)


class DispatchStatus(str, Enum):
    """Final outcome of a dispatch request."""
    DELIVERED = "delivered"
    NO_FILE = "no_file"
    FAILED = "failed"


@dataclass
class DispatchResult:
    status: DispatchStatus
    file: Optional[str] = None
    attempts: int = 0
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.status == DispatchStatus.DELIVERED

    @property
    def error_message(self) -> Optional[str]:
        if self.error is not None:
            return str(self.error)
        if self.status == DispatchStatus.NO_FILE:
            return "No file"
        return None


def build_ledger_message(path: Path, day: date, sender: str, to: str) -> Message:
    """Message carrying the ledger for ``day`` as its only attachment."""
    path = Path(path)
    stamp = f"{day:%Y-%m-%d}"
    return Message(
        sender=sender,
        to=to,
        subject=f"CredBazar submissions - {stamp}",
        body_text=f"Attached is the submissions file for {path.name}",
        attachments=[Attachment(filename=path.name, path=path)],
    )
