"""
Pydantic models for scheduled medications, their daily tracking entries
and mood logs. All of them live in memory only.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class AdherenceStatus(str, Enum):
    """Tracking state of a single daily medication entry."""
    PENDING = "pending"
    TAKEN = "taken"
    MISSED = "missed"

    def toggled(self) -> "AdherenceStatus":
        # pending -> taken -> missed -> taken ...; never back to pending
        if self is AdherenceStatus.TAKEN:
            return AdherenceStatus.MISSED
        return AdherenceStatus.TAKEN


class MoodCategory(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    NEUTRAL = "Neutral"
    CHALLENGING = "Challenging"
    DIFFICULT = "Difficult"


class Medication(BaseModel):
    """A user-defined recurring medication reminder."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = Field(..., description="Medication display name")
    scheduled_time: datetime = Field(
        ..., description="Daily due time; its calendar day is the earliest day entries are generated for"
    )
    is_active: bool = Field(True, description="Inactive medications get no entries and are not listed")


class MedicationEntry(BaseModel):
    """One calendar-day occurrence of a medication's schedule."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    medication_id: uuid.UUID
    medication_name: str = Field(..., description="Copy of the medication name at generation time")
    scheduled_date_time: datetime
    status: AdherenceStatus = AdherenceStatus.PENDING


class MoodLog(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    mood: str
    date: datetime


class AdherenceSummary(BaseModel):
    total: int = 0
    taken: int = 0
    missed: int = 0
    pending: int = 0

    @property
    def adherence_rate(self) -> Optional[float]:
        """Share of resolved entries that were taken, or None when nothing is resolved."""
        resolved = self.taken + self.missed
        if resolved == 0:
            return None
        return self.taken / resolved


def compose_mood_label(category: MoodCategory, note: Optional[str] = None) -> str:
    """Builds the stored mood text, e.g. "Good" or "Good: slept well"."""
    note = (note or "").strip()
    if not note:
        return category.value
    return f"{category.value}: {note}"
