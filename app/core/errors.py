"""
Auth service errors. Each carries the HTTP status and the message shown to the client;
main.py turns them into {"error": message} responses.
"""
from typing import Optional


class AuthServiceError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AuthServiceError):
    """Malformed mobile number or missing fields. No state was changed."""
    status_code = 400


class RateLimitedError(AuthServiceError):
    """OTP requested again inside the cooldown window."""
    status_code = 429

    def __init__(self, retry_after: int):
        super().__init__(f"Too many requests. Please wait {retry_after} seconds.")
        self.retry_after = retry_after


class OtpVerificationError(AuthServiceError):
    """Verification did not authenticate: not found, expired or mismatch."""
    status_code = 400


class DeliveryError(Exception):
    """Raised by an SMS sender when the provider rejects or cannot be reached."""


class DeliveryUnavailableError(AuthServiceError):
    status_code = 503

    def __init__(self):
        super().__init__("Could not send OTP. Please try again later.")
