import re

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.core.errors import DeliveryError
from app.main import create_app
from app.services.sms import SmsSender

PHONE = "9876543210"


class FakeClock:
    """Callable clock the tests move by hand."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSmsSender(SmsSender):
    name = "recording"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []  # (message, destination)

    def send(self, message, destination):
        self.sent.append((message, destination))
        if self.fail:
            raise DeliveryError("provider down")
        return f"SM{len(self.sent)}"

    def last_code(self) -> str:
        message, _ = self.sent[-1]
        return re.search(r"OTP is: (\d+)", message).group(1)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sms():
    return RecordingSmsSender()


@pytest.fixture
def config():
    return Settings(_env_file=None)


@pytest.fixture
def app(config, sms, clock):
    return create_app(config, sms_sender=sms, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
