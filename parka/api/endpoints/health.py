from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from parka.api.dependencies import get_health_service, get_wearable_source
from parka.models.metrics import HealthMetric, MetricSeries
from parka.models.schemas import (
    AuthorizationResponse,
    IngestResponse,
    RefreshRequest,
    RefreshResponse,
    SampleBatch,
)
from parka.services.health_data import HealthDataService
from parka.services.wearable_source import InMemoryWearableSource, WearableDataSource

router = APIRouter()


@router.post("/health/authorize", response_model=AuthorizationResponse)
async def request_authorization(health_service: HealthDataService = Depends(get_health_service)):
    """Requests read access to the wearable data store."""
    authorization = await health_service.request_authorization()
    return AuthorizationResponse(status=authorization)


@router.post("/health/refresh", response_model=RefreshResponse)
async def refresh_health_data(
        request: Optional[RefreshRequest] = None,
        health_service: HealthDataService = Depends(get_health_service),
):
    """
    Fetches every metric over the requested window (default: the last few days)
    and replaces the displayed series of each metric that was fetched successfully.
    """
    request = request or RefreshRequest()
    result = await health_service.refresh(request.start, request.end)
    return RefreshResponse(**result.model_dump(), has_tracking_streak=health_service.has_tracking_streak())


@router.get("/health/metrics", response_model=List[MetricSeries])
async def get_all_metrics(health_service: HealthDataService = Depends(get_health_service)):
    return health_service.all_series()


@router.get("/health/metrics/{metric}", response_model=MetricSeries)
async def get_metric(metric: HealthMetric, health_service: HealthDataService = Depends(get_health_service)):
    """Daily points, trend, summary statistics and normal range for one metric."""
    return health_service.series(metric)


@router.post("/health/samples", response_model=IngestResponse, status_code=201)
async def ingest_samples(batch: SampleBatch, source: WearableDataSource = Depends(get_wearable_source)):
    """Pushes raw samples from the device into the in-memory wearable source."""
    if not isinstance(source, InMemoryWearableSource):
        raise HTTPException(status_code=409, detail="Samples are read from the wearable bridge; ingestion is disabled.")
    received = source.ingest(batch.samples)
    return IngestResponse(received=received)
