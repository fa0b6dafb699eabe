
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # App
    app_name: str = "ServiceConnect"
    debug: bool = False
    port: int = 3000
    log_level: str = "INFO"
    cors_origins: str = "*"  # comma-separated

    # Auth: JWT secret (set in .env in production)
    jwt_secret: str = "default_secret"
    jwt_algorithm: str = "HS256"
    token_max_age_seconds: int = 86400 * 7
    default_role: str = "user"

    # Mobile numbers: fixed-length digit string, prefixed with country code for SMS
    mobile_number_length: int = 10
    sms_country_code: str = "+91"

    # OTP lifecycle
    otp_length: int = 6
    otp_expiry_seconds: int = 5 * 60
    otp_rate_limit_seconds: int = 60

    # Twilio (optional; without all three the OTP is logged instead of sent)
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_phone_number: Optional[str] = None
    # If Twilio fails, log the OTP and still report success so the user can log in.
    # Turn off in production to surface delivery failures as 503.
    sms_fallback_enabled: bool = True

    class Config:
        env_file = ".env"


settings = Settings()
