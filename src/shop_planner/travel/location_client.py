"""Location collaborators: routing and weather lookups.

Two implementations of :class:`LocationService` are provided:

- :class:`LocationClient` talks to an HTTP routing/weather service.
- :class:`GeoLocationService` estimates legs offline from coordinates.

Either may raise :class:`LocationServiceError`; callers are expected to
fall back to static estimates rather than fail.
"""

from __future__ import annotations

import math
from typing import Any, Protocol

import httpx
import structlog

from shop_planner.models import (
    Coordinates,
    Location,
    TravelFact,
    TravelMethod,
    TravelSource,
    WeatherData,
)

logger = structlog.get_logger(__name__)

_DEFAULT_TIMEOUT = 10.0
_MAX_RETRIES = 2
_EARTH_RADIUS_M = 6_371_000.0

# Metres covered per minute
_WALK_SPEED = 80.0
_BIKE_SPEED = 250.0
_TRAIN_MINUTES = 15.0
_TRAIN_FARE_PENCE = 205


class LocationServiceError(Exception):
    """Raised when a travel or weather lookup cannot be answered."""


class LocationService(Protocol):
    """Interface of the external location collaborator."""

    async def estimate_travel(
        self,
        origin: Location,
        destination: Location,
        method: TravelMethod,
    ) -> TravelFact: ...

    async def forecast_weather(
        self,
        location: Location,
        days: int,
    ) -> list[WeatherData]: ...


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


class LocationClient:
    """Async HTTP client for a routing and weather service."""

    def __init__(
        self,
        base_url: str,
        timeout: float = _DEFAULT_TIMEOUT,
        max_retries: int = _MAX_RETRIES,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._transport = transport
        self._timeout = timeout
        self._max_retries = max_retries
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Lazy-initialise the shared ``httpx.AsyncClient``."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Shut down the underlying HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        """GET with retries on timeouts, transport errors and 5xx."""
        client = await self._get_client()
        last_error: Exception | None = None

        for attempt in range(self._max_retries + 1):
            try:
                response = await client.get(path, params=params)
                response.raise_for_status()
                return response.json()
            except httpx.TimeoutException as exc:
                last_error = exc
                logger.warning("location_request_timeout", path=path, attempt=attempt + 1)
            except httpx.HTTPStatusError as exc:
                if 400 <= exc.response.status_code < 500:
                    raise LocationServiceError(
                        f"Location request failed ({exc.response.status_code}): "
                        f"{exc.response.text}"
                    ) from exc
                last_error = exc
                logger.warning(
                    "location_request_http_error",
                    path=path,
                    status=exc.response.status_code,
                    attempt=attempt + 1,
                )
            except httpx.RequestError as exc:
                last_error = exc
                logger.warning(
                    "location_request_error",
                    path=path,
                    error=str(exc),
                    attempt=attempt + 1,
                )

        raise LocationServiceError(
            f"Location request to {path} failed after "
            f"{self._max_retries + 1} attempts: {last_error}"
        )

    @staticmethod
    def _location_params(prefix: str, location: Location) -> dict[str, Any]:
        params: dict[str, Any] = {f"{prefix}_name": location.name}
        if location.coordinates is not None:
            params[f"{prefix}_lat"] = location.coordinates.latitude
            params[f"{prefix}_lng"] = location.coordinates.longitude
        return params

    async def estimate_travel(
        self,
        origin: Location,
        destination: Location,
        method: TravelMethod,
    ) -> TravelFact:
        params = {
            **self._location_params("from", origin),
            **self._location_params("to", destination),
            "method": method.value,
        }
        data = await self._get("/api/v1/routes", params)
        try:
            return TravelFact(
                origin_id=origin.id,
                destination_id=destination.id,
                method=method,
                distance_m=float(data.get("distance_m", 0.0)),
                duration_min=float(data["duration_min"]),
                cost_pence=int(data.get("cost_pence", 0)),
                source=TravelSource.SERVICE,
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise LocationServiceError(f"Malformed route response: {data!r}") from exc

    async def forecast_weather(self, location: Location, days: int) -> list[WeatherData]:
        params = {**self._location_params("at", location), "days": days}
        data = await self._get("/api/v1/weather", params)
        try:
            return [WeatherData.model_validate(entry) for entry in data.get("forecast", [])]
        except ValueError as exc:
            raise LocationServiceError(f"Malformed weather response: {exc}") from exc


# ---------------------------------------------------------------------------
# Offline estimates
# ---------------------------------------------------------------------------


def haversine_m(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance between two points, in metres."""
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return 2 * _EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))


class GeoLocationService:
    """Estimates legs from straight-line distance and average speeds.

    Train legs use a flat duration and fare.  Weather is not available
    offline.
    """

    async def estimate_travel(
        self,
        origin: Location,
        destination: Location,
        method: TravelMethod,
    ) -> TravelFact:
        if origin.coordinates is None or destination.coordinates is None:
            raise LocationServiceError(
                f"No coordinates for {origin.name} -> {destination.name}"
            )

        distance = haversine_m(origin.coordinates, destination.coordinates)
        cost = 0
        if method == TravelMethod.WALK:
            duration = round(distance / _WALK_SPEED)
        elif method == TravelMethod.BIKE:
            duration = round(distance / _BIKE_SPEED)
        else:
            duration = _TRAIN_MINUTES
            cost = _TRAIN_FARE_PENCE

        return TravelFact(
            origin_id=origin.id,
            destination_id=destination.id,
            method=method,
            distance_m=round(distance, 1),
            duration_min=float(duration),
            cost_pence=cost,
            source=TravelSource.SERVICE,
        )

    async def forecast_weather(self, location: Location, days: int) -> list[WeatherData]:
        raise LocationServiceError("Weather forecasts need a location service URL")

