from pydantic import BaseModel
from typing import Optional


class SendOtpRequest(BaseModel):
    mobile: Optional[str] = None  # 10 digits, no country code


class VerifyOtpRequest(BaseModel):
    mobile: Optional[str] = None
    otp: Optional[str] = None


class SendOtpResponse(BaseModel):
    success: bool = True
    message: str


class VerifyOtpResponse(BaseModel):
    success: bool = True
    token: str
    message: str = "Login successful"


class MeResponse(BaseModel):
    mobile: str
    role: str
    expires_at: int  # unix seconds, from the token's exp claim
