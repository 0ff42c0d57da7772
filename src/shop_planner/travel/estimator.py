"""Travel estimates with bounded concurrent lookups and static fallbacks.

A :class:`TravelEstimator` lives for one optimization call.  Lookups are
memoised per ``(from, to, method)`` for that call only.  Each lookup is
bounded by a per-call timeout, the whole fan-out by an optional deadline;
anything that fails or runs late is replaced by a fallback estimate.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from shop_planner.catalog import ReferenceTables
from shop_planner.config import Settings
from shop_planner.models import (
    Location,
    Store,
    TravelFact,
    TravelMethod,
    TravelSource,
)
from shop_planner.travel.location_client import LocationService

logger = structlog.get_logger(__name__)


class TravelEstimator:
    """Produces origin-to-store facts and store-to-store travel matrices."""

    def __init__(
        self,
        settings: Settings,
        tables: ReferenceTables,
        location_service: LocationService | None = None,
        method: TravelMethod | None = None,
    ) -> None:
        self._settings = settings
        self._tables = tables
        self._service = location_service
        self._method = method or settings.default_travel_method
        self._cache: dict[tuple[str, str, TravelMethod], TravelFact] = {}

    # ------------------------------------------------------------------
    # Single legs
    # ------------------------------------------------------------------

    def fallback_fact(self, origin_id: str, store: Store) -> TravelFact:
        """Static estimate from the per-store average travel table."""
        minutes = self._tables.travel_minutes_for(store.name, store.id)
        if minutes is None:
            minutes = self._settings.default_store_minutes
        return TravelFact(
            origin_id=origin_id,
            destination_id=store.id,
            method=self._method,
            duration_min=minutes,
            source=TravelSource.FALLBACK,
        )

    async def _lookup(self, origin: Location, destination: Location) -> TravelFact | None:
        """Ask the location service; ``None`` means "use a fallback"."""
        key = (origin.id, destination.id, self._method)
        if key in self._cache:
            return self._cache[key]
        if self._service is None:
            return None

        try:
            fact = await asyncio.wait_for(
                self._service.estimate_travel(origin, destination, self._method),
                timeout=self._settings.travel_lookup_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "travel_lookup_timeout",
                origin=origin.id,
                destination=destination.id,
            )
            return None
        except Exception as exc:
            logger.warning(
                "travel_lookup_failed",
                origin=origin.id,
                destination=destination.id,
                error=str(exc),
            )
            return None

        self._cache[key] = fact
        return fact

    async def estimate_travel(self, origin: Location, store: Store) -> TravelFact:
        """Travel from *origin* to *store*, falling back to the store table."""
        fact = await self._lookup(origin, Location.for_store(store))
        if fact is None:
            fact = self.fallback_fact(origin.id, store)
            self._cache[(origin.id, store.id, self._method)] = fact
        return fact

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    async def _fan_out(
        self,
        jobs: list[Callable[[], Awaitable[None]]],
        deadline: float | None,
    ) -> None:
        """Run *jobs* on a bounded pool, abandoning any left at *deadline*.

        Each job writes its own result slot, so callers pre-fill slots
        with fallbacks and abandoned jobs simply leave them in place.
        """
        if not jobs:
            return

        semaphore = asyncio.Semaphore(max(1, self._settings.travel_workers))

        async def run(job: Callable[[], Awaitable[None]]) -> None:
            async with semaphore:
                await job()

        tasks = [asyncio.create_task(run(job)) for job in jobs]
        budget = self._settings.travel_deadline if deadline is None else deadline
        done, pending = await asyncio.wait(tasks, timeout=budget)

        if pending:
            logger.warning(
                "travel_deadline_exceeded",
                completed=len(done),
                abandoned=len(pending),
                deadline=budget,
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

    async def estimate_from_origin(
        self,
        origin: Location | None,
        stores: list[Store],
        deadline: float | None = None,
    ) -> dict[str, TravelFact]:
        """Origin-to-store facts for every store, keyed by store id.

        Without an origin only the static table is consulted.
        """
        origin_id = origin.id if origin is not None else "origin"
        facts = {store.id: self.fallback_fact(origin_id, store) for store in stores}
        if origin is None:
            return facts

        def job(store: Store) -> Callable[[], Awaitable[None]]:
            async def lookup() -> None:
                facts[store.id] = await self.estimate_travel(origin, store)

            return lookup

        await self._fan_out([job(store) for store in stores], deadline)
        return facts

    async def build_travel_matrix(
        self,
        origin: Location,
        stores: list[Store],
        deadline: float | None = None,
    ) -> list[list[float]]:
        """Build an ``(n+1) x (n+1)`` matrix of minutes; index 0 is *origin*.

        Row 0 uses :meth:`estimate_travel` (store-table fallback).  Every
        other leg that cannot be looked up defaults to
        ``settings.fallback_leg_minutes``.
        """
        nodes = [origin, *(Location.for_store(store) for store in stores)]
        size = len(nodes)
        fallback_leg = self._settings.fallback_leg_minutes

        matrix = [[0.0 if i == j else fallback_leg for j in range(size)] for i in range(size)]
        for j, store in enumerate(stores, start=1):
            matrix[0][j] = self.fallback_fact(origin.id, store).duration_min

        def origin_job(j: int, store: Store) -> Callable[[], Awaitable[None]]:
            async def lookup() -> None:
                matrix[0][j] = (await self.estimate_travel(origin, store)).duration_min

            return lookup

        def leg_job(i: int, j: int) -> Callable[[], Awaitable[None]]:
            async def lookup() -> None:
                fact = await self._lookup(nodes[i], nodes[j])
                if fact is not None:
                    matrix[i][j] = fact.duration_min

            return lookup

        jobs: list[Callable[[], Awaitable[None]]] = [
            origin_job(j, store) for j, store in enumerate(stores, start=1)
        ]
        jobs.extend(
            leg_job(i, j)
            for i in range(1, size)
            for j in range(size)
            if i != j
        )
        await self._fan_out(jobs, deadline)

        logger.debug("travel_matrix_built", stores=len(stores), lookups=len(jobs))
        return matrix
