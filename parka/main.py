"""
Main entry point for the Parka Health API.

`create_app` is the composition root: it builds the medication scheduler,
the metric aggregator, the wearable source, the health data service and the
AI coach once, and stores them on `app.state` for the request dependencies.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from parka.api.api import api_router
from parka.core.config import Settings, settings as default_settings
from parka.core.exceptions import ParkaError
from parka.scheduler import create_sweep_scheduler
from parka.services.coach_service import CoachService
from parka.services.health_data import HealthDataService
from parka.services.language_model import LanguageModelClient
from parka.services.medication_scheduler import MedicationScheduler
from parka.services.metric_aggregator import MetricAggregator
from parka.services.wearable_source import HttpWearableSource, InMemoryWearableSource, WearableDataSource

load_dotenv()
logger = logging.getLogger(__name__)


def build_wearable_source(settings: Settings) -> WearableDataSource:
    if settings.WEARABLE_BRIDGE_URL:
        logger.info(f"Reading wearable samples from bridge at {settings.WEARABLE_BRIDGE_URL}")
        return HttpWearableSource(settings.WEARABLE_BRIDGE_URL, timeout=settings.WEARABLE_TIMEOUT_SECONDS)
    return InMemoryWearableSource(zone=settings.tzinfo)


def build_language_model(settings: Settings) -> Optional[LanguageModelClient]:
    if not settings.GROQ_API_KEY:
        logger.warning("GROQ_API_KEY is not set; the AI coach is disabled.")
        return None
    try:
        return LanguageModelClient(settings)
    except Exception as e:
        logger.error(f"Error initializing Groq client: {e}")
        return None


def create_app(
        settings: Optional[Settings] = None,
        wearable_source: Optional[WearableDataSource] = None,
        llm_client: Optional[LanguageModelClient] = None,
        clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(level=settings.LOG_LEVEL)
    zone = settings.tzinfo

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Medication adherence, wearable health metrics and an AI coach for Parkinson's care.",
        version="1.0.0",
    )

    # --- Middleware ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- State ---
    scheduler = MedicationScheduler(zone, clock=clock)
    aggregator = MetricAggregator(zone, clock=clock)
    source = wearable_source or build_wearable_source(settings)
    health_service = HealthDataService(source, aggregator, default_range_days=settings.DEFAULT_RANGE_DAYS)
    coach_service = CoachService(
        scheduler,
        health_service,
        llm=llm_client or build_language_model(settings),
        summary_days=settings.DEFAULT_RANGE_DAYS,
    )

    app.state.settings = settings
    app.state.scheduler = scheduler
    app.state.aggregator = aggregator
    app.state.wearable_source = source
    app.state.health_service = health_service
    app.state.coach_service = coach_service
    app.state.sweep_scheduler = create_sweep_scheduler(settings, scheduler) if settings.ENABLE_DAILY_SWEEP else None

    # --- Error Handlers ---
    @app.exception_handler(ParkaError)
    async def parka_error_handler(request: Request, exc: ParkaError):
        """Maps service errors onto their HTTP status with a standard JSON body."""
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})

    # --- Lifecycle ---
    @app.on_event("startup")
    async def start_scheduler():
        scheduler.generate_daily_entries()
        if app.state.sweep_scheduler:
            app.state.sweep_scheduler.start()
            logger.info("Daily sweep scheduler started...")

    @app.on_event("shutdown")
    async def shutdown_scheduler():
        if app.state.sweep_scheduler and app.state.sweep_scheduler.running:
            app.state.sweep_scheduler.shutdown()
            logger.info("Daily sweep scheduler shut down...")

    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint for basic health check."""
        return {"message": f"Welcome to the {settings.PROJECT_NAME}"}

    return app


app = create_app()


def run():
    uvicorn.run("parka.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
