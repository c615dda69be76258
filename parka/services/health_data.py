"""
Orchestrates wearable reads: authorization, concurrent per-metric fetches,
daily aggregation and the latest displayed series per metric.
"""

import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel

from parka.core.exceptions import AuthorizationDenied, InvalidInput, ParkaError, Unavailable
from parka.models.metrics import HealthDataPoint, HealthMetric, MetricSeries
from parka.services.metric_aggregator import MetricAggregator
from parka.services.wearable_source import AuthorizationStatus, WearableDataSource
from parka.utils.dates import localize

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No health data found for the selected date range. Try wearing your watch more consistently."

# days of data each metric needs before the dashboard calls it a streak
TRACKING_STREAK_DAYS = 7


class RefreshResult(BaseModel):
    """Outcome of one refresh run."""
    start: datetime
    end: datetime
    applied: bool = True
    updated: List[HealthMetric] = []
    errors: Dict[HealthMetric, str] = {}
    message: Optional[str] = None


class HealthDataService:
    """
    Keeps the most recent successfully fetched series for every metric.

    A metric whose fetch fails keeps its previous series; a refresh that
    finishes after a newer one has started is dropped.
    """

    def __init__(self, source: WearableDataSource, aggregator: MetricAggregator, default_range_days: int = 7):
        self.source = source
        self.aggregator = aggregator
        self.default_range_days = default_range_days
        self.authorization = AuthorizationStatus.NOT_REQUESTED
        self.last_refresh: Optional[RefreshResult] = None
        self._data: Dict[HealthMetric, List[HealthDataPoint]] = {metric: [] for metric in HealthMetric}
        self._generation = 0

    @property
    def is_authorized(self) -> bool:
        return self.authorization == AuthorizationStatus.GRANTED

    async def request_authorization(self) -> AuthorizationStatus:
        self.authorization = await self.source.request_authorization()
        logger.info(f"Wearable authorization status: {self.authorization.value}")
        return self.authorization

    def default_window(self):
        end = self.aggregator.now()
        return end - relativedelta(days=self.default_range_days), end

    async def _fetch_metric(self, metric: HealthMetric, start: datetime, end: datetime) -> List[HealthDataPoint]:
        if metric.is_sleep:
            samples = await self.source.fetch_sleep_samples(start, end)
            return self.aggregator.aggregate_sleep_by_day(samples, metric, start, end)
        samples = await self.source.fetch_quantity_samples(metric, start, end)
        return self.aggregator.aggregate_by_day(samples, metric)

    async def refresh(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> RefreshResult:
        """
        Fetches and aggregates every metric over [start, end].

        Raises:
            InvalidInput: If start is after end.
            AuthorizationDenied: If read access was refused.
            Unavailable: If the device has no health store.
        """
        if start is None or end is None:
            default_start, default_end = self.default_window()
            start = start or default_start
            end = end or default_end
        start = localize(start, self.aggregator.zone)
        end = localize(end, self.aggregator.zone)
        if start > end:
            raise InvalidInput("'start' must not be after 'end'.")

        if not self.is_authorized:
            await self.request_authorization()
        if self.authorization == AuthorizationStatus.UNAVAILABLE:
            raise Unavailable("Health data is not available on this device.")
        if self.authorization != AuthorizationStatus.GRANTED:
            raise AuthorizationDenied("Read access to health data was not granted.")

        self._generation += 1
        generation = self._generation
        logger.info(f"Refreshing health data from {start.isoformat()} to {end.isoformat()}.")

        metrics = list(HealthMetric)
        results = await asyncio.gather(
            *(self._fetch_metric(metric, start, end) for metric in metrics),
            return_exceptions=True,
        )

        result = RefreshResult(start=start, end=end)
        if generation != self._generation:
            logger.info(f"Discarding superseded refresh #{generation}.")
            result.applied = False
            return result

        for metric, outcome in zip(metrics, results):
            if isinstance(outcome, ParkaError):
                logger.warning(f"Fetching {metric.value} failed: {outcome.message}")
                result.errors[metric] = outcome.message
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            self._data[metric] = outcome
            result.updated.append(metric)

        if all(not self._data[metric] for metric in result.updated) and not result.errors:
            result.message = NO_DATA_MESSAGE

        self.last_refresh = result
        logger.info(f"Refresh #{generation} finished: {len(result.updated)} updated, {len(result.errors)} failed.")
        return result

    async def load_recent(self, days: Optional[int] = None) -> RefreshResult:
        end = self.aggregator.now()
        return await self.refresh(end - relativedelta(days=days or self.default_range_days), end)

    def get_data_for_metric(self, metric: HealthMetric) -> List[HealthDataPoint]:
        return list(self._data[metric])

    def series(self, metric: HealthMetric) -> MetricSeries:
        points = self.get_data_for_metric(metric)
        trend = self.aggregator.classify_trend(points, metric)
        return MetricSeries(
            metric=metric,
            name=metric.display_name,
            unit=metric.unit_label,
            normal_range=metric.normal_range,
            trend=trend,
            trend_label=trend.label,
            summary=self.aggregator.summarize(points),
            points=points,
        )

    def all_series(self) -> List[MetricSeries]:
        return [self.series(metric) for metric in HealthMetric]

    def has_tracking_streak(self) -> bool:
        return all(len(self._data[metric]) >= TRACKING_STREAK_DAYS for metric in HealthMetric)
