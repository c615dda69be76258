"""
Reduces raw wearable samples to one data point per metric per day and
classifies short-term trends.
"""

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, Dict, Iterable, List, Optional

from parka.core.exceptions import InvalidInput
from parka.models.metrics import (
    ASLEEP_STAGES,
    HealthDataPoint,
    HealthMetric,
    MetricSummary,
    MetricUnit,
    QuantitySample,
    SleepSample,
    SleepStage,
    TrendStatus,
)
from parka.utils.dates import local_day, localize, start_of_day

logger = logging.getLogger(__name__)

# (from unit, to unit) -> factor applied to the raw value
UNIT_CONVERSIONS = {
    (MetricUnit.COUNT_PER_SECOND, MetricUnit.COUNT_PER_MINUTE): 60.0,
    (MetricUnit.KILOMETERS_PER_HOUR, MetricUnit.METERS_PER_SECOND): 1 / 3.6,
    (MetricUnit.RATIO, MetricUnit.PERCENT): 100.0,
    (MetricUnit.MINUTES, MetricUnit.HOURS): 1 / 60.0,
}


def convert_value(value: float, unit: MetricUnit, metric: HealthMetric) -> float:
    """
    Expresses a raw value in the metric's declared unit.

    Raises:
        InvalidInput: If no conversion from `unit` to the metric's unit is known.
    """
    if unit == metric.unit:
        return value
    factor = UNIT_CONVERSIONS.get((unit, metric.unit))
    if factor is None:
        raise InvalidInput(f"Cannot express '{unit.value}' as '{metric.unit.value}' for {metric.display_name}.")
    return value * factor


class MetricAggregator:
    """Stateless reducer; the zone fixes the calendar used for day grouping."""

    def __init__(self, zone: tzinfo, clock: Optional[Callable[[], datetime]] = None):
        self.zone = zone
        self._clock = clock or (lambda: datetime.now(zone))

    def now(self) -> datetime:
        return localize(self._clock(), self.zone)

    def _points_from(self, daily: Dict[date, float], metric: HealthMetric) -> List[HealthDataPoint]:
        return [
            HealthDataPoint(date=start_of_day(day, self.zone), value=value, metric=metric)
            for day, value in sorted(daily.items())
        ]

    def aggregate_by_day(self, samples: Iterable[QuantitySample], metric: HealthMetric) -> List[HealthDataPoint]:
        """
        Groups quantity samples by calendar day and averages each day.

        Args:
            samples: Raw readings; readings tagged with another metric are skipped.
            metric: The quantity metric being aggregated.

        Returns:
            One point per day, oldest first. Empty input gives an empty list.
        """
        if metric.is_sleep:
            raise InvalidInput(f"{metric.display_name} is interval based; use aggregate_sleep_by_day.")

        values_by_day: Dict[date, List[float]] = defaultdict(list)
        skipped = 0
        for sample in samples:
            if sample.metric != metric:
                skipped += 1
                continue
            day = local_day(sample.timestamp, self.zone)
            values_by_day[day].append(convert_value(sample.value, sample.unit, metric))

        if skipped:
            logger.debug(f"Skipped {skipped} samples not tagged as {metric.value}.")

        daily = {day: sum(values) / len(values) for day, values in values_by_day.items()}
        return self._points_from(daily, metric)

    def aggregate_sleep_by_day(
            self,
            samples: Iterable[SleepSample],
            metric: HealthMetric,
            start_date: datetime,
            end_date: datetime,
    ) -> List[HealthDataPoint]:
        """
        Sums sleep-stage durations (hours) per day of the interval start.

        `sleep_duration` counts every asleep stage, `rem_sleep` only REM.
        Only samples starting inside [start_date, end_date] are counted and
        days without qualifying samples are left out.
        """
        if metric == HealthMetric.SLEEP_DURATION:
            stages = ASLEEP_STAGES
        elif metric == HealthMetric.REM_SLEEP:
            stages = frozenset({SleepStage.ASLEEP_REM})
        else:
            raise InvalidInput(f"{metric.display_name} is not a sleep metric.")

        window_start = localize(start_date, self.zone)
        window_end = localize(end_date, self.zone)

        daily: Dict[date, float] = defaultdict(float)
        for sample in samples:
            if sample.stage not in stages:
                continue
            started = localize(sample.start, self.zone)
            if started < window_start or started > window_end:
                continue
            daily[started.date()] += sample.duration_hours

        return self._points_from(daily, metric)

    @staticmethod
    def classify_trend(points: Iterable[HealthDataPoint], metric: HealthMetric) -> TrendStatus:
        """Compares the two most recent points, honouring the metric's polarity."""
        ordered = sorted(points, key=lambda p: p.date)
        if len(ordered) < 2:
            return TrendStatus.STABLE

        delta = ordered[-1].value - ordered[-2].value
        if delta == 0:
            return TrendStatus.STABLE
        rising = delta > 0
        if metric.lower_is_better:
            return TrendStatus.WORSENING if rising else TrendStatus.IMPROVING
        return TrendStatus.IMPROVING if rising else TrendStatus.WORSENING

    @staticmethod
    def summarize(points: Iterable[HealthDataPoint]) -> MetricSummary:
        points = list(points)
        if not points:
            return MetricSummary()
        values = [p.value for p in points]
        return MetricSummary(
            count=len(values),
            average=sum(values) / len(values),
            minimum=min(values),
            maximum=max(values),
            latest=max(points, key=lambda p: p.date),
        )

    def recent(self, points: Iterable[HealthDataPoint], days: int) -> List[HealthDataPoint]:
        """Points dated within the last `days` days of the clock."""
        cutoff = self.now() - timedelta(days=days)
        return [p for p in points if p.date >= cutoff]
