"""
In-memory medication schedule and daily adherence tracking.

The scheduler owns three collections: the scheduled medications, the
rolling window of daily tracking entries (today only) and the mood logs.
`generate_daily_entries` is idempotent and is expected to be called on
every screen activation as well as by the midnight sweep.
"""

import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Callable, List, Optional, Union
from uuid import UUID

from parka.core.exceptions import InvalidInput
from parka.models.medication import (
    AdherenceStatus,
    AdherenceSummary,
    Medication,
    MedicationEntry,
    MoodLog,
)
from parka.utils.dates import at_time_of_day, local_day, localize

logger = logging.getLogger(__name__)


class MedicationScheduler:
    """
    Tracks recurring medications and guarantees at most one tracking entry
    per active medication per calendar day.

    Callers must not invoke mutations concurrently; the service runs every
    mutation on the event loop.
    """

    def __init__(self, zone: tzinfo, clock: Optional[Callable[[], datetime]] = None):
        self.zone = zone
        self._clock = clock or (lambda: datetime.now(zone))
        self._medications: List[Medication] = []
        self._entries: List[MedicationEntry] = []
        self._mood_logs: List[MoodLog] = []
        self._streak_count = 0
        self._last_log_day: Optional[date] = None

    # --- Clock helpers ---

    def now(self) -> datetime:
        return localize(self._clock(), self.zone)

    def today(self) -> date:
        return self.now().date()

    def _day_of(self, value: datetime) -> date:
        return local_day(value, self.zone)

    # --- Listings ---

    @property
    def medications(self) -> List[Medication]:
        return [m for m in self._medications if m.is_active]

    @property
    def entries(self) -> List[MedicationEntry]:
        return list(self._entries)

    @property
    def mood_logs(self) -> List[MoodLog]:
        return list(self._mood_logs)

    @property
    def streak_count(self) -> int:
        return self._streak_count

    # --- Medications ---

    def add_medication(self, name: str, scheduled_time: Union[datetime, time]) -> Medication:
        """
        Adds an active medication and refreshes today's entries.

        Args:
            name: Display name; must not be blank.
            scheduled_time: Daily due time. A bare `time` starts today.

        Raises:
            InvalidInput: If the name is empty.
        """
        if not name or not name.strip():
            raise InvalidInput("Medication name must not be empty.")

        if isinstance(scheduled_time, datetime):
            scheduled_time = localize(scheduled_time, self.zone)
        else:
            scheduled_time = at_time_of_day(self.today(), scheduled_time.hour, scheduled_time.minute, self.zone)

        medication = Medication(name=name.strip(), scheduled_time=scheduled_time)
        self._medications.append(medication)
        logger.info(f"Scheduled medication '{medication.name}' at {scheduled_time.strftime('%H:%M')}.")

        self.generate_daily_entries()
        self.record_logging_activity()
        return medication

    def remove_medication(self, medication_id: UUID) -> None:
        """Removes a medication and all of its entries. Unknown ids are ignored."""
        self._medications = [m for m in self._medications if m.id != medication_id]
        self._entries = [e for e in self._entries if e.medication_id != medication_id]

    # --- Daily entries ---

    def generate_daily_entries(self) -> List[MedicationEntry]:
        """
        Purges entries from past days and creates today's pending entries.

        Safe to call any number of times; it only mutates local state and
        never raises.

        Returns:
            The entries scheduled for today.
        """
        today = self.today()

        before = len(self._entries)
        self._entries = [e for e in self._entries if self._day_of(e.scheduled_date_time) >= today]
        purged = before - len(self._entries)

        existing = {e.medication_id for e in self._entries if self._day_of(e.scheduled_date_time) == today}
        created = 0
        for medication in self._medications:
            if not medication.is_active or medication.id in existing:
                continue
            if self._day_of(medication.scheduled_time) > today:
                continue

            local_time = localize(medication.scheduled_time, self.zone)
            self._entries.append(MedicationEntry(
                medication_id=medication.id,
                medication_name=medication.name,
                scheduled_date_time=at_time_of_day(today, local_time.hour, local_time.minute, self.zone),
            ))
            existing.add(medication.id)
            created += 1

        if purged or created:
            logger.info(f"Daily entries refreshed for {today.isoformat()}: {purged} purged, {created} created.")
        return self.get_entries_for_today()

    def get_entries_for_today(self) -> List[MedicationEntry]:
        today = self.today()
        return [e for e in self._entries if self._day_of(e.scheduled_date_time) == today]

    def toggle_entry_status(self, entry_id: UUID) -> Optional[MedicationEntry]:
        """Cycles an entry through pending -> taken -> missed -> taken. Unknown ids are ignored."""
        for entry in self._entries:
            if entry.id == entry_id:
                entry.status = entry.status.toggled()
                return entry
        return None

    def is_overdue(self, entry: MedicationEntry) -> bool:
        now = self.now()
        return (
            self._day_of(entry.scheduled_date_time) == now.date()
            and entry.scheduled_date_time < now
            and entry.status is not AdherenceStatus.TAKEN
        )

    def adherence_summary(self) -> AdherenceSummary:
        entries = self.get_entries_for_today()
        return AdherenceSummary(
            total=len(entries),
            taken=sum(1 for e in entries if e.status is AdherenceStatus.TAKEN),
            missed=sum(1 for e in entries if e.status is AdherenceStatus.MISSED),
            pending=sum(1 for e in entries if e.status is AdherenceStatus.PENDING),
        )

    # --- Mood logs ---

    def add_mood_log(self, mood: str, date: Optional[datetime] = None) -> MoodLog:
        if not mood or not mood.strip():
            raise InvalidInput("Mood must not be empty.")

        log = MoodLog(mood=mood.strip(), date=localize(date, self.zone) if date else self.now())
        self._mood_logs.append(log)
        self.record_logging_activity()
        return log

    def remove_mood_log(self, log_id: UUID) -> None:
        self._mood_logs = [log for log in self._mood_logs if log.id != log_id]

    # --- Streak ---

    def record_logging_activity(self) -> int:
        """
        Updates the consecutive-day logging streak: unchanged on the same
        day, +1 on the following day, reset to 1 after a gap.
        """
        today = self.today()
        if self._last_log_day == today:
            return self._streak_count
        if self._last_log_day == today - timedelta(days=1):
            self._streak_count += 1
        else:
            self._streak_count = 1
        self._last_log_day = today
        return self._streak_count
