"""
Per-mobile cooldown between OTP issuances (one accepted request per window).
"""
import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from app.core.store import KeyedStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitEntry:
    phone: str
    last_issued_at: float


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after: Optional[int] = None  # whole seconds, set when denied


class CooldownRateLimiter:
    def __init__(self, cooldown_seconds: float = 60, clock: Callable[[], float] = time.time):
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._entries: KeyedStore[RateLimitEntry] = KeyedStore()

    def check_and_record(self, phone: str) -> RateLimitDecision:
        """
        Allow and stamp `now` if the last accepted request is at least one cooldown old.
        A denied check leaves the stored timestamp untouched.
        """
        def _transition(entry: Optional[RateLimitEntry]):
            now = self._clock()
            if entry is not None:
                elapsed = now - entry.last_issued_at
                if elapsed < self.cooldown_seconds:
                    wait = math.ceil(self.cooldown_seconds - elapsed)
                    return entry, RateLimitDecision(allowed=False, retry_after=wait)
            return RateLimitEntry(phone=phone, last_issued_at=now), RateLimitDecision(allowed=True)

        decision = self._entries.apply(phone, _transition)
        if not decision.allowed:
            logger.info("OTP request for %s rate limited; retry in %ss", phone, decision.retry_after)
        return decision

    def last_issued_at(self, phone: str) -> Optional[float]:
        entry = self._entries.get(phone)
        return entry.last_issued_at if entry else None

    def prune(self) -> int:
        """Drop entries whose cooldown has passed; they behave exactly like absent ones."""
        now = self._clock()
        return self._entries.discard_where(lambda e: now - e.last_issued_at >= self.cooldown_seconds)
