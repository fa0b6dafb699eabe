"""
JWT helpers for ServiceConnect auth.
A token is issued once an OTP is verified; the client sends it back as
`Authorization: Bearer <token>`. Identity is the mobile number plus a default role.
"""
import logging
import time
from typing import Optional

import jwt
from fastapi import Request

from app.config import settings

logger = logging.getLogger(__name__)


def create_jwt(mobile: str, role: Optional[str] = None, now: Optional[float] = None) -> str:
    issued_at = int(now if now is not None else time.time())
    payload = {
        "sub": mobile,
        "mobile": mobile,
        "role": role or settings.default_role,
        "iat": issued_at,
        "exp": issued_at + settings.token_max_age_seconds,
    }
    return jwt.encode(
        payload,
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def decode_jwt(token: str) -> Optional[dict]:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return payload
    except jwt.PyJWTError as e:
        logger.debug("JWT decode failed: %s", e)
        return None


def get_bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user_from_request(request: Request) -> Optional[dict]:
    """
    Returns the verified claims from the bearer token, or None.
    There is no user table; the mobile number in the token is the identity.
    """
    token = get_bearer_token(request)
    if not token:
        return None
    return decode_jwt(token)
