from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
from dateutil import tz
from fastapi.testclient import TestClient

from parka.core.config import Settings
from parka.main import create_app
from parka.services.medication_scheduler import MedicationScheduler
from parka.services.metric_aggregator import MetricAggregator

UTC = tz.UTC


class FrozenClock:
    """Callable clock the tests move forward by hand."""

    def __init__(self, current: datetime):
        self.current = current

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs):
        self.current = self.current + timedelta(**kwargs)


class FakeCompletions:
    def __init__(self, reply="Hello there", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if self.reply is None:
            return SimpleNamespace(choices=[])
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.reply))])


class FakeGroq:
    """Stands in for AsyncGroq: exposes `chat.completions.create`."""

    def __init__(self, reply="Hello there", error=None):
        self.completions = FakeCompletions(reply, error)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 3, 10, 9, 0, tzinfo=UTC))


@pytest.fixture
def scheduler(clock):
    return MedicationScheduler(UTC, clock=clock)


@pytest.fixture
def aggregator(clock):
    return MetricAggregator(UTC, clock=clock)


@pytest.fixture
def test_settings():
    return Settings(ENABLE_DAILY_SWEEP=False, GROQ_API_KEY=None, WEARABLE_BRIDGE_URL=None, TIMEZONE="UTC")


@pytest.fixture
def client(test_settings, clock):
    app = create_app(test_settings, clock=clock)
    return TestClient(app)


@pytest.fixture
def fake_groq():
    return FakeGroq
