import threading

from app.core.rate_limiter import CooldownRateLimiter
from tests.conftest import PHONE


def test_first_request_allowed(clock):
    limiter = CooldownRateLimiter(60, clock=clock)

    decision = limiter.check_and_record(PHONE)

    assert decision.allowed is True
    assert decision.retry_after is None
    assert limiter.last_issued_at(PHONE) == clock.now


def test_second_request_inside_cooldown_denied_with_decreasing_wait(clock):
    limiter = CooldownRateLimiter(60, clock=clock)
    limiter.check_and_record(PHONE)

    first = limiter.check_and_record(PHONE)
    clock.advance(15)
    later = limiter.check_and_record(PHONE)

    assert first.allowed is False and first.retry_after == 60
    assert later.allowed is False and later.retry_after == 45


def test_wait_rounds_up_to_whole_seconds(clock):
    limiter = CooldownRateLimiter(60, clock=clock)
    limiter.check_and_record(PHONE)
    clock.advance(59.2)

    assert limiter.check_and_record(PHONE).retry_after == 1


def test_denied_check_does_not_move_timestamp(clock):
    limiter = CooldownRateLimiter(60, clock=clock)
    limiter.check_and_record(PHONE)
    stamped = limiter.last_issued_at(PHONE)

    clock.advance(30)
    limiter.check_and_record(PHONE)

    assert limiter.last_issued_at(PHONE) == stamped
    clock.advance(30)
    assert limiter.check_and_record(PHONE).allowed is True


def test_allowed_exactly_at_cooldown_boundary(clock):
    limiter = CooldownRateLimiter(60, clock=clock)
    limiter.check_and_record(PHONE)
    clock.advance(60)

    assert limiter.check_and_record(PHONE).allowed is True


def test_phones_are_independent(clock):
    limiter = CooldownRateLimiter(60, clock=clock)
    limiter.check_and_record(PHONE)

    assert limiter.check_and_record("9123456780").allowed is True


def test_prune_drops_only_stale_entries(clock):
    limiter = CooldownRateLimiter(60, clock=clock)
    limiter.check_and_record("9000000001")
    clock.advance(61)
    limiter.check_and_record("9000000002")

    assert limiter.prune() == 1
    assert limiter.last_issued_at("9000000001") is None
    assert limiter.last_issued_at("9000000002") is not None


def test_concurrent_requests_for_one_phone_allow_exactly_one():
    limiter = CooldownRateLimiter(60)
    barrier = threading.Barrier(16)
    results = []

    def worker():
        barrier.wait()
        results.append(limiter.check_and_record(PHONE).allowed)

    threads = [threading.Thread(target=worker) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 1
