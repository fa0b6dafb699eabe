import re
from typing import Optional

from app.config import settings
from app.core.errors import ValidationError


def is_valid_mobile(mobile: Optional[str], length: Optional[int] = None) -> bool:
    """Exactly `length` ASCII digits (10 by default). No spaces, no +country prefix."""
    if not isinstance(mobile, str):
        return False
    n = length or settings.mobile_number_length
    return re.fullmatch(r"[0-9]{%d}" % n, mobile) is not None


def validate_mobile(mobile: Optional[str], length: Optional[int] = None) -> str:
    n = length or settings.mobile_number_length
    if not mobile or not is_valid_mobile(mobile, n):
        raise ValidationError(f"Invalid mobile number. Must be {n} digits.")
    return mobile

