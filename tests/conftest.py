"""Shared test fixtures for the shopping planner."""

from __future__ import annotations

import asyncio

import pytest

from shop_planner.config import Settings
from shop_planner.models import (
    Item,
    Location,
    Store,
    TravelFact,
    TravelMethod,
    WeatherData,
)
from shop_planner.optimizer import ShoppingOptimizer
from shop_planner.travel import LocationServiceError


class FakeLocationService:
    """In-memory routing collaborator with scripted legs and delays."""

    def __init__(
        self,
        legs: dict[tuple[str, str], float] | None = None,
        delays: dict[tuple[str, str], float] | None = None,
    ) -> None:
        self.legs = legs or {}
        self.delays = delays or {}
        self.calls: list[tuple[str, str]] = []

    async def estimate_travel(
        self,
        origin: Location,
        destination: Location,
        method: TravelMethod,
    ) -> TravelFact:
        key = (origin.id, destination.id)
        self.calls.append(key)
        if key in self.delays:
            await asyncio.sleep(self.delays[key])
        if key not in self.legs:
            raise LocationServiceError(f"no route {origin.id} -> {destination.id}")
        return TravelFact(
            origin_id=origin.id,
            destination_id=destination.id,
            method=method,
            duration_min=self.legs[key],
        )

    async def forecast_weather(self, location: Location, days: int) -> list[WeatherData]:
        return []


@pytest.fixture
def settings():
    """Create test settings."""
    return Settings(
        environment="testing",
        use_geo_estimates=False,
        travel_lookup_timeout=1.0,
        travel_deadline=2.0,
    )


@pytest.fixture
def home():
    return Location(id="home", name="Home", kind="home")


@pytest.fixture
def aldi():
    return Store(id="aldi", name="Aldi", price_level="budget", rating=4)


@pytest.fixture
def tesco():
    return Store(id="tesco", name="Tesco", rating=4)


@pytest.fixture
def sainsburys():
    return Store(id="sainsburys", name="Sainsbury's", rating=3)


@pytest.fixture
def supermarkets(aldi, tesco, sainsburys):
    return [aldi, tesco, sainsburys]


@pytest.fixture
def bread_and_milk():
    return [
        Item(name="bread", quantity=1, unit="loaf"),
        Item(name="milk", quantity=1, unit="pint"),
    ]


@pytest.fixture
def optimizer(settings):
    return ShoppingOptimizer(settings)


@pytest.fixture
def fake_location():
    """Factory for scripted location collaborators."""
    return FakeLocationService
