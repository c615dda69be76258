"""Request and response bodies of the HTTP API."""

import uuid
from datetime import datetime, time
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, model_validator

from parka.models.medication import AdherenceStatus, MoodCategory
from parka.models.metrics import HealthMetric, Sample
from parka.services.wearable_source import AuthorizationStatus


# --- Medications ---

class MedicationCreate(BaseModel):
    name: str = Field(..., description="Medication display name")
    scheduled_time: Union[datetime, time] = Field(
        ..., description="Daily due time; a full datetime also sets the first day entries are generated for"
    )


class MedicationResponse(BaseModel):
    id: uuid.UUID
    name: str
    scheduled_time: datetime
    is_active: bool


class MedicationEntryResponse(BaseModel):
    id: uuid.UUID
    medication_id: uuid.UUID
    medication_name: str
    scheduled_date_time: datetime
    status: AdherenceStatus
    is_overdue: bool


class AdherenceResponse(BaseModel):
    total: int
    taken: int
    missed: int
    pending: int
    adherence_rate: Optional[float] = None


# --- Mood logs ---

class MoodLogCreate(BaseModel):
    """Either a category with an optional note, or free text in `mood`."""
    category: Optional[MoodCategory] = None
    note: Optional[str] = None
    mood: Optional[str] = None
    date: Optional[datetime] = None

    @model_validator(mode="after")
    def check_mood_or_category(self):
        if self.category is None and self.mood is None:
            raise ValueError("Either 'category' or 'mood' must be provided.")
        return self


class MoodLogResponse(BaseModel):
    id: uuid.UUID
    mood: str
    date: datetime


class StreakResponse(BaseModel):
    streak_count: int


# --- Health data ---

class AuthorizationResponse(BaseModel):
    status: AuthorizationStatus


class RefreshRequest(BaseModel):
    """Window bounds without a zone are read in the configured calendar zone."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None


class RefreshResponse(BaseModel):
    start: datetime
    end: datetime
    applied: bool
    updated: List[HealthMetric]
    errors: Dict[HealthMetric, str]
    message: Optional[str] = None
    has_tracking_streak: bool = False


class SampleBatch(BaseModel):
    samples: List[Sample]


class IngestResponse(BaseModel):
    received: int


# --- Coach ---

class ChatRequest(BaseModel):
    message: str


class ReportRequest(BaseModel):
    content: Optional[str] = Field(
        None, description="Narrative for the patient notes; defaults to the latest coach reply"
    )
    include_charts: bool = True


class MarkdownReportResponse(BaseModel):
    report_markdown: str
