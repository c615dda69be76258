"""
Adapters for the wearable data source.

The service never talks to device sensors itself. A source yields raw
samples per metric over a date range once read access has been granted.
Two adapters are provided: an in-memory source fed through the API, and an
HTTP source that queries a companion bridge running next to the device.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, tzinfo
from enum import Enum
from typing import Dict, List, Optional

import httpx
from dateutil import tz
from pydantic import TypeAdapter, ValidationError

from parka.core.exceptions import AuthorizationDenied, DecodeFailed, Unavailable
from parka.models.metrics import HealthMetric, QuantitySample, SleepSample
from parka.utils.dates import localize

logger = logging.getLogger(__name__)


class AuthorizationStatus(str, Enum):
    NOT_REQUESTED = "not_requested"
    GRANTED = "granted"
    DENIED = "denied"
    UNAVAILABLE = "unavailable"


class WearableDataSource(ABC):
    """Contract every wearable adapter fulfils."""

    @abstractmethod
    async def request_authorization(self) -> AuthorizationStatus:
        ...

    @abstractmethod
    async def fetch_quantity_samples(
            self, metric: HealthMetric, start: datetime, end: datetime
    ) -> List[QuantitySample]:
        ...

    @abstractmethod
    async def fetch_sleep_samples(self, start: datetime, end: datetime) -> List[SleepSample]:
        ...


class InMemoryWearableSource(WearableDataSource):
    """Holds samples pushed by the mobile client."""

    def __init__(self, authorization: AuthorizationStatus = AuthorizationStatus.GRANTED, zone: tzinfo = tz.UTC):
        self.authorization = authorization
        self.zone = zone
        self._quantity: Dict[HealthMetric, List[QuantitySample]] = {}
        self._sleep: List[SleepSample] = []

    def ingest(self, samples: List) -> int:
        """Stores samples; times without a zone are read in the source zone."""
        for sample in samples:
            if isinstance(sample, SleepSample):
                self._sleep.append(sample.model_copy(update={
                    "start": localize(sample.start, self.zone),
                    "end": localize(sample.end, self.zone),
                }))
            else:
                sample = sample.model_copy(update={"timestamp": localize(sample.timestamp, self.zone)})
                self._quantity.setdefault(sample.metric, []).append(sample)
        return len(samples)

    def _check_access(self):
        if self.authorization == AuthorizationStatus.UNAVAILABLE:
            raise Unavailable("Health data is not available on this device.")
        if self.authorization == AuthorizationStatus.DENIED:
            raise AuthorizationDenied("Read access to health data was denied.")

    async def request_authorization(self) -> AuthorizationStatus:
        return self.authorization

    async def fetch_quantity_samples(self, metric, start, end):
        self._check_access()
        start, end = localize(start, self.zone), localize(end, self.zone)
        samples = [s for s in self._quantity.get(metric, []) if start <= s.timestamp <= end]
        return sorted(samples, key=lambda s: s.timestamp)

    async def fetch_sleep_samples(self, start, end):
        self._check_access()
        start, end = localize(start, self.zone), localize(end, self.zone)
        samples = [s for s in self._sleep if start <= s.start <= end]
        return sorted(samples, key=lambda s: s.start)


_quantity_list = TypeAdapter(List[QuantitySample])
_sleep_list = TypeAdapter(List[SleepSample])


class HttpWearableSource(WearableDataSource):
    """
    Reads samples from a companion bridge over HTTP.

    Expected endpoints:
        GET {base_url}/authorization        -> {"status": "granted" | "denied" | "unavailable"}
        GET {base_url}/samples/{metric}     -> list of samples, filtered by ?start=&end=
    """

    def __init__(self, base_url: str, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _get(self, path: str, params: Optional[dict] = None):
        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout,
                                         transport=self._transport) as client:
                res = await client.get(path, params=params)
                res.raise_for_status()
                return res.json()
        except httpx.HTTPStatusError as e:
            if e.response.status_code in (401, 403):
                raise AuthorizationDenied(f"Wearable bridge refused access: {e.response.text}")
            raise Unavailable(f"Error from wearable bridge: {e.response.status_code}")
        except httpx.RequestError as e:
            raise Unavailable(f"Wearable bridge unavailable: {e}")
        except ValueError as e:
            raise DecodeFailed(f"Wearable bridge returned invalid JSON: {e}")

    async def request_authorization(self) -> AuthorizationStatus:
        try:
            payload = await self._get("/authorization")
        except AuthorizationDenied:
            return AuthorizationStatus.DENIED
        except Unavailable as e:
            logger.warning(f"Authorization request failed: {e.message}")
            return AuthorizationStatus.UNAVAILABLE
        try:
            return AuthorizationStatus(payload.get("status"))
        except (AttributeError, ValueError):
            raise DecodeFailed(f"Unexpected authorization payload: {payload}")

    def _window(self, start: datetime, end: datetime) -> dict:
        return {"start": start.isoformat(), "end": end.isoformat()}

    async def fetch_quantity_samples(self, metric, start, end):
        payload = await self._get(f"/samples/{metric.value}", params=self._window(start, end))
        try:
            return _quantity_list.validate_python(payload)
        except ValidationError as e:
            raise DecodeFailed(f"Malformed {metric.value} samples: {e}")

    async def fetch_sleep_samples(self, start, end):
        payload = await self._get("/samples/sleep", params=self._window(start, end))
        try:
            return _sleep_list.validate_python(payload)
        except ValidationError as e:
            raise DecodeFailed(f"Malformed sleep samples: {e}")
