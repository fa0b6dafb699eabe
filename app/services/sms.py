"""
SMS delivery for OTP codes. Twilio when configured; otherwise the message is logged only.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional

from twilio.base.exceptions import TwilioException
from twilio.rest import Client

from app.config import Settings, settings as default_settings
from app.core.errors import DeliveryError

logger = logging.getLogger(__name__)


class SmsSender(ABC):
    name = "base"

    @abstractmethod
    def send(self, message: str, destination: str) -> Optional[str]:
        """Send `message` to `destination` (E.164). Returns a provider message id if any; raises DeliveryError."""


class LogSmsSender(SmsSender):
    """Stand-in when Twilio credentials are missing. Never fails."""
    name = "mock"

    def send(self, message: str, destination: str) -> Optional[str]:
        logger.info("[MOCK SMS] To: %s, Message: %s", destination, message)
        return None


class TwilioSmsSender(SmsSender):
    name = "twilio"

    def __init__(self, account_sid: str, auth_token: str, from_number: str, client: Optional[Client] = None):
        self.from_number = from_number
        self._client = client or Client(account_sid, auth_token)

    def send(self, message: str, destination: str) -> Optional[str]:
        try:
            sent = self._client.messages.create(
                body=message,
                from_=self.from_number,
                to=destination,
            )
        except (TwilioException, OSError) as e:
            raise DeliveryError(f"Twilio send to {destination} failed: {e}") from e
        logger.info("OTP sent to %s via Twilio (sid=%s)", destination, sent.sid)
        return sent.sid


def build_sms_sender(config: Optional[Settings] = None) -> SmsSender:
    config = config or default_settings
    if not all([config.twilio_account_sid, config.twilio_auth_token, config.twilio_phone_number]):
        logger.warning("Twilio credentials missing. SMS will be logged to console.")
        return LogSmsSender()
    return TwilioSmsSender(
        config.twilio_account_sid,
        config.twilio_auth_token,
        config.twilio_phone_number,
    )
