"""OTP-based verification, password reset and 2FA endpoints."""

from docquery.api.client import ApiClient
from docquery.schemas.otp_schema import (
    OtpPurpose,
    OtpRequest,
    OtpResponse,
    OtpVerifyRequest,
    PasswordResetConfirmRequest,
)


class OtpService:
    """Client for the OTP service."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def _post(self, url: str, payload: dict | None = None) -> OtpResponse:
        response = await self._client.post(url, json=payload)
        return OtpResponse.model_validate(response.json())

    async def request_otp(
        self, email: str, purpose: OtpPurpose = "verification"
    ) -> OtpResponse:
        request = OtpRequest(email=email, purpose=purpose)
        return await self._post("/otp/request", request.model_dump())

    async def verify_otp(self, email: str, otp: str) -> OtpResponse:
        request = OtpVerifyRequest(email=email, otp=otp)
        return await self._post("/otp/verify", request.model_dump())

    async def request_password_reset(self, email: str) -> OtpResponse:
        return await self._post("/otp/password-reset/request", {"email": email})

    async def confirm_password_reset(
        self, email: str, otp: str, new_password: str
    ) -> OtpResponse:
        request = PasswordResetConfirmRequest(
            email=email, otp=otp, new_password=new_password
        )
        return await self._post("/otp/password-reset/confirm", request.model_dump())

    async def enable_2fa(self) -> OtpResponse:
        """Start enabling 2FA; the backend emails a code to confirm with."""
        return await self._post("/otp/2fa/enable")

    async def confirm_2fa(self, email: str, otp: str) -> OtpResponse:
        request = OtpVerifyRequest(email=email, otp=otp)
        return await self._post("/otp/2fa/confirm", request.model_dump())

    async def disable_2fa(self, email: str, otp: str) -> OtpResponse:
        request = OtpVerifyRequest(email=email, otp=otp)
        return await self._post("/otp/2fa/disable", request.model_dump())
