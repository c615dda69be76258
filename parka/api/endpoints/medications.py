import uuid
from typing import List

from fastapi import APIRouter, Depends, Response, status

from parka.api.dependencies import get_scheduler
from parka.models.medication import Medication, MedicationEntry
from parka.models.schemas import (
    AdherenceResponse,
    MedicationCreate,
    MedicationEntryResponse,
    MedicationResponse,
)
from parka.services.medication_scheduler import MedicationScheduler

router = APIRouter()


def _entry_response(entry: MedicationEntry, scheduler: MedicationScheduler) -> MedicationEntryResponse:
    return MedicationEntryResponse(
        **entry.model_dump(),
        is_overdue=scheduler.is_overdue(entry),
    )


def _medication_response(medication: Medication) -> MedicationResponse:
    return MedicationResponse(**medication.model_dump())


@router.post("/medications", response_model=MedicationResponse, status_code=status.HTTP_201_CREATED)
async def add_medication(request: MedicationCreate, scheduler: MedicationScheduler = Depends(get_scheduler)):
    """
    Schedules a daily medication and creates today's entry for it.
    """
    medication = scheduler.add_medication(request.name, request.scheduled_time)
    return _medication_response(medication)


@router.get("/medications", response_model=List[MedicationResponse])
async def list_medications(scheduler: MedicationScheduler = Depends(get_scheduler)):
    return [_medication_response(m) for m in scheduler.medications]


@router.delete("/medications/{medication_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_medication(medication_id: uuid.UUID, scheduler: MedicationScheduler = Depends(get_scheduler)):
    """Removes the medication and its entries. Unknown ids still answer 204."""
    scheduler.remove_medication(medication_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/medications/entries/generate", response_model=List[MedicationEntryResponse])
async def generate_entries(scheduler: MedicationScheduler = Depends(get_scheduler)):
    """
    Expires entries from previous days and creates any missing entries for today.
    Safe to call on every screen activation.
    """
    entries = scheduler.generate_daily_entries()
    return [_entry_response(e, scheduler) for e in entries]


@router.get("/medications/entries/today", response_model=List[MedicationEntryResponse])
async def get_entries_for_today(scheduler: MedicationScheduler = Depends(get_scheduler)):
    entries = sorted(scheduler.get_entries_for_today(), key=lambda e: e.scheduled_date_time)
    return [_entry_response(e, scheduler) for e in entries]


@router.post("/medications/entries/{entry_id}/toggle", response_model=List[MedicationEntryResponse])
async def toggle_entry(entry_id: uuid.UUID, scheduler: MedicationScheduler = Depends(get_scheduler)):
    """
    Marks an entry taken, or flips a taken entry to missed. Unknown ids leave
    the list unchanged. Returns today's entries.
    """
    scheduler.toggle_entry_status(entry_id)
    entries = sorted(scheduler.get_entries_for_today(), key=lambda e: e.scheduled_date_time)
    return [_entry_response(e, scheduler) for e in entries]


@router.get("/medications/adherence", response_model=AdherenceResponse)
async def get_adherence(scheduler: MedicationScheduler = Depends(get_scheduler)):
    summary = scheduler.adherence_summary()
    return AdherenceResponse(**summary.model_dump(), adherence_rate=summary.adherence_rate)
