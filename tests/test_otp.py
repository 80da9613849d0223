"""
Tests for OTP issuance, verification and consumption.
"""

import httpx
import pytest

from credbazar_core.errors import (
    Cooldown,
    InvalidCode,
    InvalidIdentifier,
    OTPAlreadyUsed,
    OTPDeliveryFailed,
    OTPExpired,
    OTPMismatch,
    OTPNotFound,
    TooManyAttempts,
)
from credbazar_core.otp import (
    HTTPOTPDelivery,
    OTPConfig,
    OTPDelivery,
    OTPVerifier,
    generate_otp,
    generate_salt,
    hash_otp,
    verify_otp_hash,
)

MOBILE = "9876543210"


def wrong_code(code: str) -> str:
    return "0" * len(code)  # issued codes never start with 0


class FailingDelivery(OTPDelivery):
    name = "failing"

    async def deliver(self, identifier: str, code: str) -> None:
        raise OTPDeliveryFailed()


class TestOTPHashing:
    """Tests for code generation and hashing."""

    def test_generate_otp_length(self):
        """Codes have the requested number of digits and no leading zero."""
        for _ in range(50):
            code = generate_otp(6)
            assert len(code) == 6
            assert code.isdigit()
            assert code[0] != "0"

    def test_generate_otp_rejects_zero_length(self):
        with pytest.raises(ValueError):
            generate_otp(0)

    def test_hash_roundtrip(self):
        """The right code verifies, a wrong one does not."""
        salt = generate_salt()
        stored = hash_otp("123456", salt)

        assert verify_otp_hash("123456", salt, stored) is True
        assert verify_otp_hash("654321", salt, stored) is False

    def test_salt_changes_hash(self):
        assert hash_otp("123456", "a") != hash_otp("123456", "b")


class TestOTPIssue:
    """Tests for issuing codes."""

    @pytest.mark.asyncio
    async def test_issue_delivers_code(self, clock, delivery):
        """The issued code reaches the delivery channel."""
        verifier = OTPVerifier(delivery=delivery, clock=clock)

        issued = await verifier.issue(MOBILE)

        assert delivery.codes[MOBILE] == issued.code
        assert issued.masked_identifier == "******3210"
        assert issued.expires_in == 600
        assert len(verifier) == 1

    @pytest.mark.asyncio
    async def test_issue_rejects_bad_identifier(self, clock, delivery):
        verifier = OTPVerifier(delivery=delivery, clock=clock)

        with pytest.raises(InvalidIdentifier):
            await verifier.issue("12345")

        assert delivery.codes == {}

    @pytest.mark.asyncio
    async def test_cooldown_reports_remaining_seconds(self, clock, delivery):
        """A reissue inside the cooldown is refused with the seconds left."""
        verifier = OTPVerifier(delivery=delivery, clock=clock)
        await verifier.issue(MOBILE)

        clock.advance(30.5)
        with pytest.raises(Cooldown) as exc_info:
            await verifier.issue(MOBILE)

        assert exc_info.value.remaining_seconds == 90
        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_cooldown_remaining_decreases(self, clock, delivery):
        """The reported wait shrinks as the clock moves on."""
        verifier = OTPVerifier(delivery=delivery, clock=clock)
        await verifier.issue(MOBILE)
        seen = []

        for step in (10, 25, 40, 44):
            clock.advance(step)
            with pytest.raises(Cooldown) as exc_info:
                await verifier.issue(MOBILE)
            seen.append(exc_info.value.remaining_seconds)

        assert seen == [110, 85, 45, 1]
        assert all(a > b for a, b in zip(seen, seen[1:]))

    @pytest.mark.asyncio
    async def test_reissue_after_cooldown_replaces_code(self, clock, delivery):
        """After the cooldown a new code replaces the old one."""
        verifier = OTPVerifier(delivery=delivery, clock=clock)
        first = await verifier.issue(MOBILE)

        clock.advance(121)
        second = await verifier.issue(MOBILE)

        if first.code != second.code:
            with pytest.raises(OTPMismatch):
                await verifier.verify(MOBILE, first.code)
        assert await verifier.verify(MOBILE, second.code) is True

    @pytest.mark.asyncio
    async def test_cooldown_is_per_identifier(self, clock, delivery):
        verifier = OTPVerifier(delivery=delivery, clock=clock)
        await verifier.issue(MOBILE)

        await verifier.issue("9123456780")

        assert len(verifier) == 2

    @pytest.mark.asyncio
    async def test_exhausted_record_does_not_hold_cooldown(self, clock, delivery):
        """Once attempts are used up a new code may be requested at once."""
        verifier = OTPVerifier(delivery=delivery, clock=clock)
        issued = await verifier.issue(MOBILE)
        for _ in range(2):
            with pytest.raises(OTPMismatch):
                await verifier.verify(MOBILE, wrong_code(issued.code))
        with pytest.raises(TooManyAttempts):
            await verifier.verify(MOBILE, wrong_code(issued.code))

        reissued = await verifier.issue(MOBILE)

        assert await verifier.verify(MOBILE, reissued.code) is True

    @pytest.mark.asyncio
    async def test_failed_delivery_keeps_cooldown(self, clock):
        """A code that could not be delivered still blocks immediate resends."""
        verifier = OTPVerifier(delivery=FailingDelivery(), clock=clock)

        with pytest.raises(OTPDeliveryFailed):
            await verifier.issue(MOBILE)
        with pytest.raises(Cooldown):
            await verifier.issue(MOBILE)

    @pytest.mark.asyncio
    async def test_custom_length(self, clock, delivery):
        verifier = OTPVerifier(OTPConfig(length=4), delivery=delivery, clock=clock)

        issued = await verifier.issue(MOBILE)

        assert len(issued.code) == 4


class TestOTPVerify:
    """Tests for verifying codes."""

    @pytest.mark.asyncio
    async def test_correct_code_verifies_once(self, clock, delivery):
        """A correct code succeeds exactly once."""
        verifier = OTPVerifier(delivery=delivery, clock=clock)
        issued = await verifier.issue(MOBILE)

        assert await verifier.verify(MOBILE, issued.code) is True
        assert await verifier.is_verified(MOBILE) is True
        with pytest.raises(OTPAlreadyUsed):
            await verifier.verify(MOBILE, issued.code)

    @pytest.mark.asyncio
    async def test_code_is_trimmed(self, clock, delivery):
        verifier = OTPVerifier(delivery=delivery, clock=clock)
        issued = await verifier.issue(MOBILE)

        assert await verifier.verify(MOBILE, f" {issued.code} ") is True

    @pytest.mark.asyncio
    async def test_missing_input(self, clock, delivery):
        verifier = OTPVerifier(delivery=delivery, clock=clock)

        with pytest.raises(InvalidCode):
            await verifier.verify(MOBILE, "")
        with pytest.raises(InvalidCode):
            await verifier.verify("", "123456")

    @pytest.mark.asyncio
    async def test_never_issued(self, clock, delivery):
        verifier = OTPVerifier(delivery=delivery, clock=clock)

        with pytest.raises(OTPNotFound):
            await verifier.verify(MOBILE, "123456")

    @pytest.mark.asyncio
    async def test_expired_code(self, clock, delivery):
        """An expired code fails and the record is gone afterwards."""
        verifier = OTPVerifier(delivery=delivery, clock=clock)
        issued = await verifier.issue(MOBILE)

        clock.advance(601)
        with pytest.raises(OTPExpired):
            await verifier.verify(MOBILE, issued.code)

        with pytest.raises(OTPNotFound) as exc_info:
            await verifier.verify(MOBILE, issued.code)
        assert not isinstance(exc_info.value, OTPExpired)

    @pytest.mark.asyncio
    async def test_code_valid_at_expiry_boundary(self, clock, delivery):
        verifier = OTPVerifier(delivery=delivery, clock=clock)
        issued = await verifier.issue(MOBILE)

        clock.advance(600)

        assert await verifier.verify(MOBILE, issued.code) is True

    @pytest.mark.asyncio
    async def test_attempt_limit(self, clock, delivery):
        """Three wrong codes burn the record; the right code then finds nothing."""
        verifier = OTPVerifier(delivery=delivery, clock=clock)
        issued = await verifier.issue(MOBILE)
        bad = wrong_code(issued.code)

        with pytest.raises(OTPMismatch) as first:
            await verifier.verify(MOBILE, bad)
        with pytest.raises(OTPMismatch) as second:
            await verifier.verify(MOBILE, bad)
        with pytest.raises(TooManyAttempts):
            await verifier.verify(MOBILE, bad)

        assert first.value.attempts_remaining == 2
        assert second.value.attempts_remaining == 1
        with pytest.raises(OTPNotFound):
            await verifier.verify(MOBILE, issued.code)

    @pytest.mark.asyncio
    async def test_mismatch_then_correct(self, clock, delivery):
        verifier = OTPVerifier(delivery=delivery, clock=clock)
        issued = await verifier.issue(MOBILE)

        with pytest.raises(OTPMismatch):
            await verifier.verify(MOBILE, wrong_code(issued.code))

        assert await verifier.verify(MOBILE, issued.code) is True


    @pytest.mark.asyncio
    async def test_malformed_codes_do_not_use_attempts(self, clock, delivery):
        """Junk codes are rejected up front and the real code still works."""
        verifier = OTPVerifier(delivery=delivery, clock=clock)
        issued = await verifier.issue(MOBILE)

        for junk in ("abc", "x", "!!", "12345", "1234567", "١٢٣٤٥٦"):
            with pytest.raises(InvalidCode):
                await verifier.verify(MOBILE, junk)

        assert await verifier.verify(MOBILE, issued.code) is True

    @pytest.mark.asyncio
    async def test_malformed_identifier_rejected(self, clock, delivery):
        verifier = OTPVerifier(delivery=delivery, clock=clock)
        await verifier.issue(MOBILE)

        with pytest.raises(InvalidIdentifier):
            await verifier.verify("abc", "123456")
        with pytest.raises(InvalidIdentifier):
            await verifier.verify("98765", "123456")

    @pytest.mark.asyncio
    async def test_reissue_clears_verified_state(self, clock, delivery):
        """A new code replaces an earlier verification until it is verified too."""
        verifier = OTPVerifier(delivery=delivery, clock=clock)
        first = await verifier.issue(MOBILE)
        await verifier.verify(MOBILE, first.code)
        assert await verifier.is_verified(MOBILE) is True

        clock.advance(121)
        second = await verifier.issue(MOBILE)

        assert await verifier.is_verified(MOBILE) is False
        await verifier.verify(MOBILE, second.code)
        assert await verifier.is_verified(MOBILE) is True
        assert await verifier.consume(MOBILE) is True

    @pytest.mark.asyncio
    async def test_reissue_then_consume_unverified(self, clock, delivery):
        verifier = OTPVerifier(delivery=delivery, clock=clock)
        first = await verifier.issue(MOBILE)
        await verifier.verify(MOBILE, first.code)

        clock.advance(121)
        await verifier.issue(MOBILE)

        assert await verifier.consume(MOBILE) is False


class TestOTPConsume:
    """Tests for consuming verified state."""

    @pytest.mark.asyncio
    async def test_consume_verified(self, clock, delivery):
        """Verified state is consumed once."""
        verifier = OTPVerifier(delivery=delivery, clock=clock)
        issued = await verifier.issue(MOBILE)
        await verifier.verify(MOBILE, issued.code)

        assert await verifier.consume(MOBILE) is True
        assert await verifier.consume(MOBILE) is False
        assert await verifier.is_verified(MOBILE) is False

    @pytest.mark.asyncio
    async def test_consume_unverified(self, clock, delivery):
        verifier = OTPVerifier(delivery=delivery, clock=clock)
        await verifier.issue(MOBILE)

        assert await verifier.consume(MOBILE) is False
        assert len(verifier) == 0

    @pytest.mark.asyncio
    async def test_consume_expired(self, clock, delivery):
        verifier = OTPVerifier(delivery=delivery, clock=clock)
        issued = await verifier.issue(MOBILE)
        await verifier.verify(MOBILE, issued.code)

        clock.advance(601)

        assert await verifier.consume(MOBILE) is False


class TestHTTPOTPDelivery:
    """Tests for the SMS gateway channel."""

    @staticmethod
    def make_delivery(handler) -> HTTPOTPDelivery:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return HTTPOTPDelivery("https://sms.test/send", "secret", client=client)

    @pytest.mark.asyncio
    async def test_posts_payload_with_bearer(self):
        """The gateway receives the code and the bearer key."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = request.read()
            return httpx.Response(200, json={"success": True})

        channel = self.make_delivery(handler)
        await channel.deliver(MOBILE, "123456")
        await channel.close()

        assert seen["auth"] == "Bearer secret"
        assert b'"otp":"123456"' in seen["body"].replace(b" ", b"")
        assert b'"mobile":"9876543210"' in seen["body"].replace(b" ", b"")

    @pytest.mark.asyncio
    async def test_rejected_by_gateway(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"success": False})

        channel = self.make_delivery(handler)

        with pytest.raises(OTPDeliveryFailed):
            await channel.deliver(MOBILE, "123456")
        await channel.close()

    @pytest.mark.asyncio
    async def test_success_flag_on_error_status(self):
        """A body reporting success is accepted whatever the status."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"success": True})

        channel = self.make_delivery(handler)
        await channel.deliver(MOBILE, "123456")
        await channel.close()

    @pytest.mark.asyncio
    async def test_gateway_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        channel = self.make_delivery(handler)

        with pytest.raises(OTPDeliveryFailed):
            await channel.deliver(MOBILE, "123456")
        await channel.close()
