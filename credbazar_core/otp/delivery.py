"""
OTP Delivery Channels
=====================
Hand a freshly issued code to the subscriber.
"""

from typing import Optional

import httpx
import structlog

from ..errors import OTPDeliveryFailed
from ..records.identifiers import mask_identifier

logger = structlog.get_logger(__name__)


class OTPDelivery:
    """Interface for delivering a code to an identifier."""

    name = "base"

    async def deliver(self, identifier: str, code: str) -> None:
        """
        Deliver ``code`` to ``identifier``.

        Raises:
            OTPDeliveryFailed: If the channel did not accept the code
        """
        raise NotImplementedError

    async def close(self) -> None:
        pass


class LoggingOTPDelivery(OTPDelivery):
    """Demo channel: writes the code to the log instead of sending it."""

    name = "log"

    async def deliver(self, identifier: str, code: str) -> None:
        logger.info("otp_demo_delivery", identifier=identifier, otp=code)


class HTTPOTPDelivery(OTPDelivery):
    """
    SMS gateway channel.

    POSTs ``{"mobile", "otp", "message"}`` as JSON with a bearer key and
    treats any 2xx response, or a body with ``"success": true``, as accepted.
    """

    name = "http"

    def __init__(
        self,
        api_url: str,
        api_key: str,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def deliver(self, identifier: str, code: str) -> None:
        payload = {
            "mobile": identifier,
            "otp": code,
            "message": f"Your CredBazar OTP is: {code}. Valid for 10 minutes.",
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = await self._get_client().post(
                self.api_url, json=payload, headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error(
                "otp_gateway_unreachable",
                identifier=mask_identifier(identifier),
                error=str(e),
            )
            raise OTPDeliveryFailed() from e

        if response.is_success:
            return

        try:
            body = response.json()
            accepted = isinstance(body, dict) and bool(body.get("success"))
        except ValueError:
            accepted = False

        if not accepted:
            logger.error(
                "otp_gateway_rejected",
                identifier=mask_identifier(identifier),
                status_code=response.status_code,
            )
            raise OTPDeliveryFailed()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
