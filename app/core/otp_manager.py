"""
OTP lifecycle per mobile number: issue (rate limited), verify, single-use consume.

Slot states: Absent -> Pending (issue) -> Absent (correct code, or looked up after expiry).
Reissue is Pending -> Pending and replaces the old code at once. A wrong code leaves
the slot Pending, so the user can retry until expiry. Expired records are only
removed when looked up (or by purge_expired); nothing runs in the background.
"""
import logging
import secrets
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

from app.core.errors import RateLimitedError
from app.core.rate_limiter import CooldownRateLimiter
from app.core.store import KeyedStore
from app.core.validators import validate_mobile

logger = logging.getLogger(__name__)


class VerifyOutcome(str, Enum):
    AUTHENTICATED = "authenticated"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    MISMATCH = "mismatch"


@dataclass(frozen=True)
class OtpRecord:
    phone: str
    code: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        # Still valid at exactly expires_at
        return now > self.expires_at


@dataclass(frozen=True)
class IssuedOtp:
    code: str
    expires_at: float
    replaced: bool = False  # True when a still-valid code was overwritten


def generate_code(length: int = 6) -> str:
    """Uniform over length-digit numbers without a leading zero (6 -> 100000..999999)."""
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(10 ** length - low))


class OTPManager:
    def __init__(
        self,
        rate_limiter: CooldownRateLimiter,
        expiry_seconds: float = 300,
        code_length: int = 6,
        mobile_length: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.rate_limiter = rate_limiter
        self.expiry_seconds = expiry_seconds
        self.code_length = code_length
        self.mobile_length = mobile_length
        self._clock = clock
        self._records: KeyedStore[OtpRecord] = KeyedStore()

    def issue(self, phone: str) -> IssuedOtp:
        """
        Create a fresh OTP for `phone`, overwriting any pending one.
        Raises ValidationError for a malformed number and RateLimitedError inside the cooldown.
        The caller delivers the code; a failed delivery does not undo this.
        """
        validate_mobile(phone, self.mobile_length)
        decision = self.rate_limiter.check_and_record(phone)
        if not decision.allowed:
            raise RateLimitedError(decision.retry_after)

        code = generate_code(self.code_length)

        def _transition(current: Optional[OtpRecord]) -> Tuple[OtpRecord, IssuedOtp]:
            now = self._clock()
            replaced = current is not None and not current.is_expired(now)
            record = OtpRecord(phone=phone, code=code, expires_at=now + self.expiry_seconds)
            return record, IssuedOtp(code=record.code, expires_at=record.expires_at, replaced=replaced)

        issued = self._records.apply(phone, _transition)
        logger.info("OTP %s for %s", "reissued" if issued.replaced else "issued", phone)
        return issued

    def verify(self, phone: str, submitted_code: str) -> VerifyOutcome:
        """Check `submitted_code` against the pending OTP. Exact string match, no trimming."""
        def _transition(current: Optional[OtpRecord]) -> Tuple[Optional[OtpRecord], VerifyOutcome]:
            if current is None:
                return None, VerifyOutcome.NOT_FOUND
            if current.is_expired(self._clock()):
                return None, VerifyOutcome.EXPIRED
            if submitted_code != current.code:
                return current, VerifyOutcome.MISMATCH
            return None, VerifyOutcome.AUTHENTICATED

        outcome = self._records.apply(phone, _transition)
        if outcome == VerifyOutcome.AUTHENTICATED:
            logger.info("OTP verified for %s", phone)
        else:
            logger.info("OTP verification for %s failed: %s", phone, outcome.value)
        return outcome

    def pending(self, phone: str) -> Optional[OtpRecord]:
        """The stored record, expired or not. Read-only; does not consume."""
        return self._records.get(phone)

    def purge_expired(self) -> int:
        now = self._clock()
        removed = self._records.discard_where(lambda r: r.is_expired(now))
        if removed:
            logger.debug("Purged %d expired OTP(s)", removed)
        return removed
