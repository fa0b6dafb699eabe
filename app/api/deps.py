import time
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Request

from app.config import Settings
from app.core.otp_manager import OTPManager
from app.core.rate_limiter import CooldownRateLimiter
from app.services.sms import SmsSender, build_sms_sender


@dataclass
class AuthContext:
    """Everything the auth routes share for the life of the process."""
    settings: Settings
    otp_manager: OTPManager
    rate_limiter: CooldownRateLimiter
    sms_sender: SmsSender


def build_auth_context(
    config: Settings,
    sms_sender: Optional[SmsSender] = None,
    clock: Callable[[], float] = time.time,
) -> AuthContext:
    rate_limiter = CooldownRateLimiter(cooldown_seconds=config.otp_rate_limit_seconds, clock=clock)
    otp_manager = OTPManager(
        rate_limiter,
        expiry_seconds=config.otp_expiry_seconds,
        code_length=config.otp_length,
        mobile_length=config.mobile_number_length,
        clock=clock,
    )
    return AuthContext(
        settings=config,
        otp_manager=otp_manager,
        rate_limiter=rate_limiter,
        sms_sender=sms_sender or build_sms_sender(config),
    )


def get_auth_context(request: Request) -> AuthContext:
    return request.app.state.auth
