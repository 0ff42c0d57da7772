"""Configuration management for the shopping planner."""

from __future__ import annotations

from pydantic import Field

from common.config import Settings as BaseSettings

from shop_planner.models import TravelMethod


class Settings(BaseSettings):
    """Shopping planner configuration.

    Inherits logging and environment settings from
    ``common.config.Settings`` and adds optimizer-specific options.
    """

    # Service identity
    service_name: str = "shop-planner"
    service_version: str = "0.1.0"
    host: str = "0.0.0.0"
    port: int = 8030

    # Combination search bounds
    max_combination_size: int = Field(default=3, ge=1, le=3)
    max_catalog_stores: int = 20

    # Travel lookups
    location_service_url: str = ""
    use_geo_estimates: bool = True
    default_travel_method: TravelMethod = TravelMethod.WALK
    travel_workers: int = 8
    travel_lookup_timeout: float = 3.0
    travel_deadline: float = 10.0

    # Fallback durations (minutes)
    fallback_leg_minutes: float = 15.0
    default_store_minutes: float = 20.0
    shopping_minutes_per_store: float = 20.0


def get_settings() -> Settings:
    """Return a settings instance built from the environment."""
    return Settings()
