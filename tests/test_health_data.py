import asyncio
from datetime import datetime, timedelta

import httpx
import pytest
from dateutil import tz

from parka.core.exceptions import AuthorizationDenied, DecodeFailed, Unavailable
from parka.models.metrics import HealthMetric, MetricUnit, QuantitySample, SleepSample, SleepStage
from parka.services.health_data import NO_DATA_MESSAGE, HealthDataService
from parka.services.wearable_source import AuthorizationStatus, HttpWearableSource, InMemoryWearableSource

UTC = tz.UTC
START = datetime(2024, 3, 3, tzinfo=UTC)
END = datetime(2024, 3, 10, 9, 0, tzinfo=UTC)


def _hr(day_offset, value):
    return QuantitySample(
        metric=HealthMetric.HEART_RATE,
        timestamp=START + timedelta(days=day_offset, hours=10),
        value=value,
        unit=MetricUnit.COUNT_PER_MINUTE,
    )


class FlakySource(InMemoryWearableSource):
    """Fails heart-rate reads while `failing` is set."""

    def __init__(self):
        super().__init__()
        self.failing = False

    async def fetch_quantity_samples(self, metric, start, end):
        if self.failing and metric == HealthMetric.HEART_RATE:
            raise Unavailable("Heart rate store is busy.")
        return await super().fetch_quantity_samples(metric, start, end)


class GatedSource(InMemoryWearableSource):
    """Holds heart-rate reads until the gate captured at call time opens."""

    def __init__(self):
        super().__init__()
        self.gate = None
        self.entered = asyncio.Event()

    async def fetch_quantity_samples(self, metric, start, end):
        samples = await super().fetch_quantity_samples(metric, start, end)
        gate = self.gate
        if gate is not None and metric == HealthMetric.HEART_RATE:
            self.entered.set()
            await gate.wait()
        return samples


def test_refresh_aggregates_every_metric(aggregator):
    source = InMemoryWearableSource()
    source.ingest([_hr(0, 60), _hr(0, 80), _hr(1, 72)])
    source.ingest([SleepSample(start=START + timedelta(hours=1), end=START + timedelta(hours=3),
                               stage=SleepStage.ASLEEP_REM)])
    service = HealthDataService(source, aggregator)

    result = asyncio.run(service.refresh(START, END))

    assert result.applied
    assert set(result.updated) == set(HealthMetric)
    assert result.errors == {}
    assert [p.value for p in service.get_data_for_metric(HealthMetric.HEART_RATE)] == [70, 72]
    assert service.get_data_for_metric(HealthMetric.REM_SLEEP)[0].value == pytest.approx(2.0)
    assert service.get_data_for_metric(HealthMetric.TREMOR) == []
    assert service.authorization == AuthorizationStatus.GRANTED


def test_series_reports_trend_and_summary(aggregator):
    source = InMemoryWearableSource()
    source.ingest([_hr(0, 64), _hr(1, 74)])
    service = HealthDataService(source, aggregator)
    asyncio.run(service.refresh(START, END))

    series = service.series(HealthMetric.HEART_RATE)

    assert series.name == "Heart Rate"
    assert series.unit == "bpm"
    assert series.normal_range == (60.0, 80.0)
    assert series.trend_label == "Needs Attention"
    assert series.summary.average == pytest.approx(69.0)


def test_refresh_without_data_reports_message(aggregator):
    service = HealthDataService(InMemoryWearableSource(), aggregator)

    result = asyncio.run(service.refresh())

    assert result.message == NO_DATA_MESSAGE
    assert all(not s.points for s in service.all_series())


def test_refresh_defaults_to_recent_window(aggregator, clock):
    service = HealthDataService(InMemoryWearableSource(), aggregator, default_range_days=7)

    result = asyncio.run(service.refresh())

    assert result.end == clock()
    assert result.start == clock() - timedelta(days=7)


def test_denied_authorization_raises(aggregator):
    service = HealthDataService(InMemoryWearableSource(AuthorizationStatus.DENIED), aggregator)
    with pytest.raises(AuthorizationDenied):
        asyncio.run(service.refresh(START, END))


def test_unavailable_store_raises(aggregator):
    service = HealthDataService(InMemoryWearableSource(AuthorizationStatus.UNAVAILABLE), aggregator)
    with pytest.raises(Unavailable):
        asyncio.run(service.refresh(START, END))


def test_failed_metric_keeps_previous_series(aggregator):
    source = FlakySource()
    source.ingest([_hr(0, 65)])
    service = HealthDataService(source, aggregator)
    asyncio.run(service.refresh(START, END))

    source.failing = True
    source.ingest([_hr(1, 90)])
    result = asyncio.run(service.refresh(START, END))

    assert HealthMetric.HEART_RATE in result.errors
    assert HealthMetric.HEART_RATE not in result.updated
    assert [p.value for p in service.get_data_for_metric(HealthMetric.HEART_RATE)] == [65]


def test_superseded_refresh_is_discarded(aggregator):
    async def scenario():
        source = GatedSource()
        source.ingest([_hr(0, 60)])
        service = HealthDataService(source, aggregator)

        gate = asyncio.Event()
        source.gate = gate
        first = asyncio.create_task(service.refresh(START, END))
        await source.entered.wait()

        source.gate = None
        source.ingest([_hr(1, 80)])
        second = await service.refresh(START, END)

        gate.set()
        return await first, second, service

    first, second, service = asyncio.run(scenario())

    assert not first.applied
    assert second.applied
    assert [p.value for p in service.get_data_for_metric(HealthMetric.HEART_RATE)] == [60, 80]
    assert service.last_refresh is second


def test_tracking_streak_needs_a_week_of_every_metric(aggregator):
    service = HealthDataService(InMemoryWearableSource(), aggregator)
    assert not service.has_tracking_streak()


def _bridge(handler):
    return HttpWearableSource("http://bridge.local", transport=httpx.MockTransport(handler))


def test_http_source_reads_samples():
    def handler(request):
        if request.url.path == "/authorization":
            return httpx.Response(200, json={"status": "granted"})
        assert request.url.path == "/samples/heart_rate"
        assert "start" in request.url.params
        return httpx.Response(200, json=[{
            "metric": "heart_rate", "timestamp": "2024-03-09T10:00:00+00:00", "value": 70, "unit": "count/min",
        }])

    source = _bridge(handler)

    assert asyncio.run(source.request_authorization()) == AuthorizationStatus.GRANTED
    samples = asyncio.run(source.fetch_quantity_samples(HealthMetric.HEART_RATE, START, END))
    assert samples[0].value == 70


def test_http_source_maps_refusal_to_denied():
    source = _bridge(lambda request: httpx.Response(403, text="forbidden"))

    assert asyncio.run(source.request_authorization()) == AuthorizationStatus.DENIED
    with pytest.raises(AuthorizationDenied):
        asyncio.run(source.fetch_sleep_samples(START, END))


def test_http_source_maps_server_errors_to_unavailable():
    source = _bridge(lambda request: httpx.Response(500))
    with pytest.raises(Unavailable):
        asyncio.run(source.fetch_quantity_samples(HealthMetric.TREMOR, START, END))


def test_http_source_rejects_malformed_payload():
    source = _bridge(lambda request: httpx.Response(200, json=[{"stage": "asleep_rem"}]))
    with pytest.raises(DecodeFailed):
        asyncio.run(source.fetch_sleep_samples(START, END))
