"""
Deliver an issued OTP by SMS.

Runs after the OTP is stored and outside any store lock. If the provider fails and
sms_fallback_enabled is on, the code is logged and the request still succeeds: the
stored OTP stays valid however the user gets hold of it.
"""
import logging
import math
from enum import Enum
from typing import Optional

from starlette.concurrency import run_in_threadpool

from app.config import Settings, settings as default_settings
from app.core.errors import DeliveryError, DeliveryUnavailableError
from app.services.sms import SmsSender

logger = logging.getLogger(__name__)


class DeliveryMode(str, Enum):
    SMS = "sms"
    MOCK = "mock"
    FALLBACK = "fallback"


def format_otp_message(code: str, config: Optional[Settings] = None) -> str:
    config = config or default_settings
    minutes = max(1, math.ceil(config.otp_expiry_seconds / 60))
    return f"Your {config.app_name} OTP is: {code}. Valid for {minutes} minutes."


def to_destination(mobile: str, config: Optional[Settings] = None) -> str:
    config = config or default_settings
    return f"{config.sms_country_code}{mobile}"


async def deliver_otp(
    sender: SmsSender,
    mobile: str,
    code: str,
    config: Optional[Settings] = None,
) -> DeliveryMode:
    config = config or default_settings
    message = format_otp_message(code, config)
    destination = to_destination(mobile, config)
    try:
        # Twilio's client is blocking
        await run_in_threadpool(sender.send, message, destination)
    except Exception as e:
        # Any provider failure, expected or not, takes the fallback path
        logger.error("Error sending SMS to %s: %s", destination, e, exc_info=not isinstance(e, DeliveryError))
        if not config.sms_fallback_enabled:
            raise DeliveryUnavailableError() from e
        logger.info("[FALLBACK SMS] To: %s, Message: %s", destination, message)
        return DeliveryMode.FALLBACK
    return DeliveryMode.MOCK if sender.name == "mock" else DeliveryMode.SMS
