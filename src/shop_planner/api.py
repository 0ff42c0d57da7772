"""FastAPI application for the shopping planner.

Exposes REST endpoints for:
- Ranked store recommendations under budget / travel-time limits
- Cheapest store combination
- Fastest visiting route from an origin
- Per-store availability breakdown
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from common import ErrorResponse, HealthResponse

from shop_planner.config import Settings
from shop_planner.exceptions import InvalidInputError
from shop_planner.models import (
    Constraints,
    Item,
    Location,
    OptimizedShoppingList,
    Store,
    StoreBreakdown,
)
from shop_planner.optimizer import ShoppingOptimizer
from shop_planner.travel import GeoLocationService, LocationClient, LocationService

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class OptimizeRequest(BaseModel):
    """Ranked recommendation request."""

    items: list[Item]
    stores: list[Store]
    constraints: Constraints = Field(default_factory=Constraints)
    origin: Location | None = None
    deadline: float | None = None


class CheapestRequest(BaseModel):
    """Cheapest store combination request."""

    items: list[Item]
    stores: list[Store]
    max_stores: int = 3
    allow_partial: bool = True
    origin: Location | None = None


class FastestRouteRequest(BaseModel):
    """Fastest route request."""

    items: list[Item]
    stores: list[Store]
    origin: Location
    deadline: float | None = None


class BreakdownRequest(BaseModel):
    """Single-store breakdown request."""

    store: Store
    items: list[Item]
    stores: list[Store] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def build_location_service(settings: Settings) -> LocationService | None:
    """Pick the location collaborator configured in *settings*."""
    if settings.location_service_url:
        return LocationClient(
            settings.location_service_url,
            timeout=settings.travel_lookup_timeout,
        )
    if settings.use_geo_estimates:
        return GeoLocationService()
    return None


def create_app(
    settings: Settings | None = None,
    optimizer: ShoppingOptimizer | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or Settings()
    location_service = build_location_service(settings)
    optimizer = optimizer or ShoppingOptimizer(settings, location_service=location_service)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        if isinstance(location_service, LocationClient):
            await location_service.close()

    app = FastAPI(
        title="Shop Planner",
        description=(
            "Plans which stores to visit for a shopping list: cheapest "
            "combination, fastest route, and ranked recommendations."
        ),
        version=settings.service_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.optimizer = optimizer

    # -------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            service=settings.service_name,
            version=settings.service_version,
        )

    # -------------------------------------------------------------------
    # Shopping endpoints
    # -------------------------------------------------------------------

    @app.post(
        "/api/v1/shopping/optimize",
        response_model=OptimizedShoppingList,
        tags=["shopping"],
    )
    async def optimize(req: OptimizeRequest) -> OptimizedShoppingList:
        """Rank stores and trim them to the budget and travel-time limits."""
        return await optimizer.optimize_shopping_list(
            req.items,
            req.stores,
            constraints=req.constraints,
            origin=req.origin,
            deadline=req.deadline,
        )

    @app.post(
        "/api/v1/shopping/cheapest",
        response_model=OptimizedShoppingList,
        tags=["shopping"],
    )
    async def cheapest(req: CheapestRequest) -> OptimizedShoppingList:
        """Find the cheapest combination of up to three stores."""
        return await optimizer.find_cheapest_combination(
            req.items,
            req.stores,
            max_stores=req.max_stores,
            allow_partial=req.allow_partial,
            origin=req.origin,
        )

    @app.post(
        "/api/v1/shopping/fastest-route",
        response_model=OptimizedShoppingList,
        tags=["shopping"],
    )
    async def fastest_route(req: FastestRouteRequest) -> OptimizedShoppingList:
        """Order store visits nearest-first from the origin."""
        return await optimizer.find_fastest_route(
            req.items,
            req.stores,
            req.origin,
            deadline=req.deadline,
        )

    @app.post(
        "/api/v1/shopping/breakdown",
        response_model=StoreBreakdown,
        tags=["shopping"],
    )
    async def breakdown(req: BreakdownRequest) -> StoreBreakdown:
        """Show what one store can supply and where to find the rest."""
        return optimizer.get_store_breakdown(req.store, req.items, req.stores)

    # -------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(
        request: Request, exc: InvalidInputError
    ) -> JSONResponse:
        logger.info("invalid_input", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error="Invalid input",
                detail=str(exc),
                status_code=422,
            ).model_dump(),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "unhandled_exception", error=str(exc), path=request.url.path
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="Internal server error",
                detail=str(exc),
                status_code=500,
            ).model_dump(),
        )

    return app
