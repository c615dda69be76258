import uuid
from typing import List

from fastapi import APIRouter, Depends, Response, status

from parka.api.dependencies import get_scheduler
from parka.models.medication import compose_mood_label
from parka.models.schemas import MoodLogCreate, MoodLogResponse, StreakResponse
from parka.services.medication_scheduler import MedicationScheduler

router = APIRouter()


@router.post("/mood-logs", response_model=MoodLogResponse, status_code=status.HTTP_201_CREATED)
async def add_mood_log(request: MoodLogCreate, scheduler: MedicationScheduler = Depends(get_scheduler)):
    """
    Logs a mood, either as a category with an optional note ("Good: slept well")
    or as free text.
    """
    mood = compose_mood_label(request.category, request.note) if request.category else request.mood
    log = scheduler.add_mood_log(mood, request.date)
    return MoodLogResponse(**log.model_dump())


@router.get("/mood-logs", response_model=List[MoodLogResponse])
async def list_mood_logs(scheduler: MedicationScheduler = Depends(get_scheduler)):
    logs = sorted(scheduler.mood_logs, key=lambda log: log.date, reverse=True)
    return [MoodLogResponse(**log.model_dump()) for log in logs]


@router.delete("/mood-logs/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_mood_log(log_id: uuid.UUID, scheduler: MedicationScheduler = Depends(get_scheduler)):
    scheduler.remove_mood_log(log_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/mood-logs/streak", response_model=StreakResponse)
async def get_streak(scheduler: MedicationScheduler = Depends(get_scheduler)):
    """Consecutive days with at least one medication or mood log."""
    return StreakResponse(streak_count=scheduler.streak_count)
