from fastapi import Request

from parka.services.coach_service import CoachService
from parka.services.health_data import HealthDataService
from parka.services.medication_scheduler import MedicationScheduler
from parka.services.wearable_source import WearableDataSource


def get_scheduler(request: Request) -> MedicationScheduler:
    """Dependency returning the scheduler built by `create_app`."""
    return request.app.state.scheduler


def get_health_service(request: Request) -> HealthDataService:
    return request.app.state.health_service


def get_wearable_source(request: Request) -> WearableDataSource:
    return request.app.state.wearable_source


def get_coach_service(request: Request) -> CoachService:
    return request.app.state.coach_service
