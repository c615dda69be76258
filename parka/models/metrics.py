"""
Pydantic models for wearable samples and aggregated health data.

Raw samples arrive as a tagged union (quantity readings versus sleep-stage
intervals) so the aggregator's two reduction paths stay distinct.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field


class MetricUnit(str, Enum):
    """Units of measure for raw sample values."""
    COUNT_PER_MINUTE = "count/min"
    COUNT_PER_SECOND = "count/s"
    METERS_PER_SECOND = "m/s"
    KILOMETERS_PER_HOUR = "km/h"
    PERCENT = "%"
    RATIO = "ratio"
    HOURS = "hours"
    MINUTES = "minutes"


class HealthMetric(str, Enum):
    """The fixed set of tracked quantities."""
    HEART_RATE = "heart_rate"
    TREMOR = "tremor"
    WALKING_SPEED = "walking_speed"
    BALANCE = "balance"
    WALKING_ASYMMETRY = "walking_asymmetry"
    SLEEP_DURATION = "sleep_duration"
    REM_SLEEP = "rem_sleep"
    RESPIRATORY_RATE = "respiratory_rate"

    @property
    def display_name(self) -> str:
        return _METRIC_INFO[self]["name"]

    @property
    def unit(self) -> MetricUnit:
        return _METRIC_INFO[self]["unit"]

    @property
    def unit_label(self) -> str:
        """Short unit label used in summaries and reports."""
        return _METRIC_INFO[self]["label"]

    @property
    def normal_range(self) -> Tuple[float, float]:
        return _METRIC_INFO[self]["range"]

    @property
    def info_text(self) -> str:
        return _METRIC_INFO[self]["info"]

    @property
    def lower_is_better(self) -> bool:
        return self in LOWER_IS_BETTER

    @property
    def is_sleep(self) -> bool:
        return self in (HealthMetric.SLEEP_DURATION, HealthMetric.REM_SLEEP)


LOWER_IS_BETTER = frozenset({
    HealthMetric.HEART_RATE,
    HealthMetric.RESPIRATORY_RATE,
    HealthMetric.WALKING_ASYMMETRY,
    HealthMetric.TREMOR,
})

_METRIC_INFO = {
    HealthMetric.HEART_RATE: {
        "name": "Heart Rate", "unit": MetricUnit.COUNT_PER_MINUTE, "label": "bpm", "range": (60.0, 80.0),
        "info": "Tracks heart rate from the watch, reflecting cardiovascular health.",
    },
    HealthMetric.TREMOR: {
        "name": "Tremor", "unit": MetricUnit.PERCENT, "label": "intensity", "range": (0.0, 1.0),
        "info": "Monitors hand or body tremors using watch motion sensors.",
    },
    HealthMetric.WALKING_SPEED: {
        "name": "Walking Speed", "unit": MetricUnit.METERS_PER_SECOND, "label": "m/s", "range": (1.0, 1.2),
        "info": "Measures walking speed, indicating mobility changes.",
    },
    HealthMetric.BALANCE: {
        "name": "Balance", "unit": MetricUnit.PERCENT, "label": "score", "range": (80.0, 90.0),
        "info": "Assesses steadiness from motion data, crucial for coordination.",
    },
    HealthMetric.WALKING_ASYMMETRY: {
        "name": "Walking Asymmetry", "unit": MetricUnit.PERCENT, "label": "%", "range": (0.0, 5.0),
        "info": "Evaluates gait evenness, highlighting balance issues.",
    },
    HealthMetric.SLEEP_DURATION: {
        "name": "Sleep Duration", "unit": MetricUnit.HOURS, "label": "hours", "range": (7.0, 8.0),
        "info": "Tracks total sleep time, vital for energy and mood.",
    },
    HealthMetric.REM_SLEEP: {
        "name": "REM Sleep", "unit": MetricUnit.HOURS, "label": "hours", "range": (1.5, 2.0),
        "info": "Monitors REM sleep duration, linked to cognitive health.",
    },
    HealthMetric.RESPIRATORY_RATE: {
        "name": "Respiratory Rate", "unit": MetricUnit.COUNT_PER_MINUTE, "label": "breaths/min",
        "range": (12.0, 16.0),
        "info": "Measures breathing rate, reflecting respiratory health.",
    },
}


class SleepStage(str, Enum):
    IN_BED = "in_bed"
    AWAKE = "awake"
    ASLEEP_UNSPECIFIED = "asleep_unspecified"
    ASLEEP_CORE = "asleep_core"
    ASLEEP_DEEP = "asleep_deep"
    ASLEEP_REM = "asleep_rem"


ASLEEP_STAGES = frozenset({
    SleepStage.ASLEEP_UNSPECIFIED,
    SleepStage.ASLEEP_CORE,
    SleepStage.ASLEEP_DEEP,
    SleepStage.ASLEEP_REM,
})


class TrendStatus(str, Enum):
    IMPROVING = "Improving"
    STABLE = "Stable"
    WORSENING = "Worsening"

    @property
    def label(self) -> str:
        """User-facing wording; worsening trends are shown as needing attention."""
        return "Needs Attention" if self is TrendStatus.WORSENING else self.value


# --- Raw samples ---

class QuantitySample(BaseModel):
    """A single timestamped reading for a quantity metric."""
    kind: Literal["quantity"] = "quantity"
    metric: HealthMetric
    timestamp: datetime
    value: float
    unit: MetricUnit


class SleepSample(BaseModel):
    """An interval spent in one sleep stage."""
    kind: Literal["sleep"] = "sleep"
    start: datetime
    end: datetime
    stage: SleepStage

    @property
    def duration_hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600.0


Sample = Annotated[Union[QuantitySample, SleepSample], Field(discriminator="kind")]


# --- Aggregated data ---

class HealthDataPoint(BaseModel):
    """One aggregated daily observation for a metric."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4, description="Synthetic list identity, not a business key")
    date: datetime = Field(..., description="Start of the calendar day the value represents")
    value: float
    metric: HealthMetric

    @property
    def formatted_value(self) -> str:
        if self.metric == HealthMetric.WALKING_ASYMMETRY:
            return f"{self.value:.1f}%"
        if self.metric in (HealthMetric.HEART_RATE, HealthMetric.RESPIRATORY_RATE, HealthMetric.BALANCE):
            return f"{self.value:.1f}"
        return f"{self.value:.2f}"


class MetricSummary(BaseModel):
    """Descriptive statistics over a metric's daily points."""
    count: int = 0
    average: float = 0.0
    minimum: float = 0.0
    maximum: float = 0.0
    latest: Optional[HealthDataPoint] = None


class MetricSeries(BaseModel):
    """Everything the client needs to render one metric card."""
    metric: HealthMetric
    name: str
    unit: str
    normal_range: Tuple[float, float]
    trend: TrendStatus
    trend_label: str
    summary: MetricSummary
    points: List[HealthDataPoint]
