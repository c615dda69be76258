# parka/api/api.py
from fastapi import APIRouter
from parka.api.endpoints import coach, health, medications, mood_logs

api_router = APIRouter()
api_router.include_router(medications.router, tags=["Medications"])
api_router.include_router(mood_logs.router, tags=["Mood Logs"])
api_router.include_router(health.router, tags=["Health Data"])
api_router.include_router(coach.router, tags=["AI Coach"])
