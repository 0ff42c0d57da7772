"""Travel-time estimation backed by an optional location collaborator."""

from shop_planner.travel.estimator import TravelEstimator
from shop_planner.travel.location_client import (
    GeoLocationService,
    LocationClient,
    LocationService,
    LocationServiceError,
)

__all__ = [
    "GeoLocationService",
    "LocationClient",
    "LocationService",
    "LocationServiceError",
    "TravelEstimator",
]
