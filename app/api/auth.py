"""
Auth API: mobile OTP login.
POST /send-otp issues a code (rate limited per number) and texts it; POST /verify-otp
consumes it and returns a JWT. GET /me reads the bearer token back.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from app.api.deps import AuthContext, get_auth_context
from app.core.auth_utils import create_jwt, get_current_user_from_request
from app.core.errors import OtpVerificationError, ValidationError
from app.core.otp_manager import VerifyOutcome
from app.schemas.auth import (
    MeResponse,
    SendOtpRequest,
    SendOtpResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from app.services.otp_delivery import DeliveryMode, deliver_otp

router = APIRouter()
logger = logging.getLogger(__name__)

_VERIFY_ERRORS = {
    VerifyOutcome.NOT_FOUND: "OTP not found or expired. Please request a new one.",
    VerifyOutcome.EXPIRED: "OTP expired.",
    VerifyOutcome.MISMATCH: "Invalid OTP.",
}


@router.post("/send-otp", response_model=SendOtpResponse)
async def send_otp(body: SendOtpRequest, ctx: AuthContext = Depends(get_auth_context)):
    """Issue an OTP for `mobile` and send it by SMS. 400 on a bad number, 429 inside the cooldown."""
    issued = ctx.otp_manager.issue(body.mobile)
    # Stored before sending: the code is usable even if the SMS never arrives
    mode = await deliver_otp(ctx.sms_sender, body.mobile, issued.code, ctx.settings)
    logger.info("OTP for %s delivered via %s", body.mobile, mode.value)
    if mode == DeliveryMode.FALLBACK:
        return SendOtpResponse(message="OTP sent (fallback mode)")
    return SendOtpResponse(message="OTP sent successfully")


@router.post("/verify-otp", response_model=VerifyOtpResponse)
async def verify_otp(body: VerifyOtpRequest, ctx: AuthContext = Depends(get_auth_context)):
    """Exchange a valid OTP for a JWT. The OTP is single-use."""
    if not body.mobile or not body.otp:
        raise ValidationError("Mobile and OTP are required.")

    outcome = ctx.otp_manager.verify(body.mobile, body.otp)
    if outcome != VerifyOutcome.AUTHENTICATED:
        raise OtpVerificationError(_VERIFY_ERRORS[outcome])

    token = create_jwt(body.mobile)
    return VerifyOtpResponse(token=token)


@router.get("/me", response_model=MeResponse)
async def me(request: Request):
    """Return the identity in the bearer token, or 401."""
    claims = get_current_user_from_request(request)
    if not claims or not claims.get("mobile"):
        raise HTTPException(status_code=401, detail="Not logged in")
    return MeResponse(mobile=claims["mobile"], role=claims.get("role") or "", expires_at=claims["exp"])
