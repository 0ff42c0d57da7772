"""Shopping list optimizer.

Composes classification, availability, pricing, travel estimation,
scoring, constraint filtering, subset search and route sequencing into
the public operations:

- :meth:`ShoppingOptimizer.optimize_shopping_list`
- :meth:`ShoppingOptimizer.find_cheapest_combination`
- :meth:`ShoppingOptimizer.find_fastest_route`
- :meth:`ShoppingOptimizer.get_store_breakdown`

Nothing is persisted between calls; travel lookups are memoised per call.
"""

from __future__ import annotations

import structlog

from shop_planner.catalog import ReferenceTables, default_inventories
from shop_planner.config import Settings, get_settings
from shop_planner.exceptions import InvalidInputError
from shop_planner.models import (
    Constraints,
    Item,
    ItemAlternative,
    Location,
    OptimizedShoppingList,
    PlanStatus,
    StockLevel,
    Store,
    StoreBreakdown,
    StoreInventory,
    StoreRecommendation,
)
from shop_planner.planning import (
    AvailabilityIndex,
    CombinationSearch,
    ConstraintFilter,
    CostModel,
    ItemClassifier,
    RecommendationScorer,
    RouteSequencer,
)
from shop_planner.travel import TravelEstimator
from shop_planner.travel.location_client import LocationService

logger = structlog.get_logger(__name__)

_BASE_SHOPPING_MINUTES = 10.0
_MINUTES_PER_ITEM = 1.5


class ShoppingOptimizer:
    """Plans which stores to visit for a shopping list."""

    def __init__(
        self,
        settings: Settings | None = None,
        location_service: LocationService | None = None,
        tables: ReferenceTables | None = None,
        inventories: list[StoreInventory] | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._location_service = location_service
        self._tables = tables or ReferenceTables()

        inventories = default_inventories() if inventories is None else inventories
        self._availability = AvailabilityIndex(inventories)
        self._cost_model = CostModel(self._tables, self._availability)
        self._classifier = ItemClassifier()
        self._scorer = RecommendationScorer(self._cost_model)
        self._constraint_filter = ConstraintFilter(self._cost_model)
        self._search = CombinationSearch(
            self._cost_model,
            self._availability,
            max_size=self._settings.max_combination_size,
        )
        self._sequencer = RouteSequencer()

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def optimize_shopping_list(
        self,
        items: list[Item],
        stores: list[Store],
        constraints: Constraints | None = None,
        origin: Location | None = None,
        deadline: float | None = None,
    ) -> OptimizedShoppingList:
        """Rank every store that can supply part of the list and trim to limits.

        Stores are ranked on everything they stock.  Walking that ranking,
        each item is then bought at the first admitted store that stocks it,
        so every item appears at most once in the plan.  Stores are returned
        in descending priority; if a budget is given the total never exceeds
        it.  When the constraints reject every store the plan is empty, and
        the unconstrained plan is attached as ``suggestion``.
        """
        self._validate_items(items)
        self._validate_stores(stores)
        constraints = constraints or Constraints()
        classified = self._classifier.classify_all(items)

        candidates = self._distribute(classified, stores)

        estimator = self._new_estimator()
        travel = await estimator.estimate_from_origin(
            origin, [store for store, _ in candidates], deadline
        )

        recommendations = []
        for store, available in candidates:
            minutes = travel[store.id].duration_min
            recommendations.append(
                StoreRecommendation(
                    store=store,
                    items=available,
                    subtotal=self._cost_model.estimate_store_subtotal(available, store),
                    travel_time_min=minutes,
                    priority_score=self._scorer.score(store, available, constraints, minutes),
                )
            )
        ranked = self._scorer.rank(recommendations)

        outcome = self._constraint_filter.apply(ranked, constraints)
        plan = self._build_plan(classified, outcome.admitted)
        plan.over_budget = outcome.over_budget

        if ranked and not outcome.admitted:
            plan.status = PlanStatus.CONSTRAINT_UNSATISFIABLE
            unconstrained = self._constraint_filter.apply(ranked, Constraints())
            plan.suggestion = self._build_plan(classified, unconstrained.admitted)

        logger.info(
            "shopping_list_optimized",
            items=len(classified),
            candidates=len(ranked),
            admitted=len(outcome.admitted),
            total=plan.total_estimated_cost,
            status=plan.status.value,
            over_budget=plan.over_budget,
            rejected_for_time=len(outcome.rejected_for_time),
        )
        return plan

    async def find_cheapest_combination(
        self,
        items: list[Item],
        stores: list[Store],
        max_stores: int = 3,
        allow_partial: bool = True,
        origin: Location | None = None,
    ) -> OptimizedShoppingList:
        """Cheapest subset of at most *max_stores* stores covering the list.

        Items go to the cheapest stocking store in the subset, each exactly
        once.  If no subset covers everything, the subset covering the most
        items is returned with the rest in ``unfulfilled_items``.
        """
        self._validate_items(items)
        self._validate_stores(stores)
        if len(stores) > self._settings.max_catalog_stores:
            raise InvalidInputError(
                f"At most {self._settings.max_catalog_stores} stores can be "
                f"combined, got {len(stores)}"
            )
        classified = self._classifier.classify_all(items)

        result = self._search.search(
            classified, stores, max_stores=max_stores, allow_partial=allow_partial
        )

        estimator = self._new_estimator()
        travel = await estimator.estimate_from_origin(
            origin, [r.store for r in result.recommendations]
        )
        recommendations = [
            r.model_copy(update={"travel_time_min": travel[r.store.id].duration_min})
            for r in result.recommendations
        ]

        logger.info(
            "cheapest_combination_found",
            subsets=result.subsets_evaluated,
            stores=[r.store.id for r in recommendations],
            total=result.total_cost,
            unfulfilled=len(result.unfulfilled_items),
        )
        return self._build_plan(classified, recommendations)

    async def find_fastest_route(
        self,
        items: list[Item],
        stores: list[Store],
        origin: Location,
        deadline: float | None = None,
    ) -> OptimizedShoppingList:
        """Visit every store that stocks part of the list, nearest first.

        Each stop lists everything it can supply, so an item may appear at
        several stops.  Stores are returned in visiting order, each with
        the travel time from the previous stop.
        """
        self._validate_items(items)
        self._validate_stores(stores)
        classified = self._classifier.classify_all(items)

        distribution = self._distribute(classified, stores)

        estimator = self._new_estimator()
        matrix = await estimator.build_travel_matrix(
            origin, [store for store, _ in distribution], deadline
        )
        legs = self._sequencer.sequence(matrix)

        route = []
        for leg in legs:
            store, available = distribution[leg.index - 1]
            route.append(
                StoreRecommendation(
                    store=store,
                    items=available,
                    subtotal=self._cost_model.estimate_store_subtotal(available, store),
                    travel_time_min=leg.minutes,
                )
            )

        logger.info(
            "fastest_route_found",
            stops=[r.store.id for r in route],
            travel_minutes=self._sequencer.total_minutes(legs),
        )
        return self._build_plan(classified, route)

    def get_store_breakdown(
        self,
        store: Store,
        items: list[Item],
        stores: list[Store] | None = None,
    ) -> StoreBreakdown:
        """What *store* can supply from *items*, and where to get the rest.

        Alternatives are drawn from *stores* (the wider catalog), excluding
        *store* itself.
        """
        self._validate_items(items)
        classified = self._classifier.classify_all(items)

        available: list[Item] = []
        unavailable: list[Item] = []
        for item in classified:
            if self._availability.is_available(item, store):
                available.append(item)
            else:
                unavailable.append(item)

        low_stock = [
            item.name
            for item in available
            if self._availability.stock_level(item, store) == StockLevel.LOW
        ]

        others = sorted(
            (s for s in stores or [] if s.id != store.id), key=lambda s: s.id
        )
        alternatives = [
            ItemAlternative(item=item.name, store_id=other.id, store_name=other.name)
            for item in unavailable
            for other in others
            if self._availability.is_available(item, other)
        ]

        return StoreBreakdown(
            store=store,
            available_items=available,
            unavailable_items=unavailable,
            low_stock_items=low_stock,
            estimated_cost=self._cost_model.estimate_store_subtotal(available, store),
            estimated_shopping_time_min=_BASE_SHOPPING_MINUTES
            + _MINUTES_PER_ITEM * len(available),
            alternatives=alternatives,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _new_estimator(self) -> TravelEstimator:
        return TravelEstimator(self._settings, self._tables, self._location_service)

    def _distribute(
        self,
        items: list[Item],
        stores: list[Store],
    ) -> list[tuple[Store, list[Item]]]:
        """Pair each store, in id order, with the items it stocks."""
        distribution: list[tuple[Store, list[Item]]] = []
        for store in sorted(stores, key=lambda s: s.id):
            available = self._availability.items_available_at(items, store)
            if available:
                distribution.append((store, available))
        return distribution

    def _build_plan(
        self,
        items: list[Item],
        recommendations: list[StoreRecommendation],
    ) -> OptimizedShoppingList:
        """Aggregate totals and report items no recommended store covers."""
        covered = {
            id(item) for rec in recommendations for item in rec.items
        }
        unfulfilled = [item for item in items if id(item) not in covered]

        travel = sum(r.travel_time_min for r in recommendations)
        shopping = self._settings.shopping_minutes_per_store * len(recommendations)

        return OptimizedShoppingList(
            items=items,
            stores=recommendations,
            total_estimated_cost=round(sum(r.subtotal for r in recommendations), 2),
            estimated_time_min=round(travel + shopping, 2),
            status=PlanStatus.PARTIAL if unfulfilled else PlanStatus.COMPLETE,
            unfulfilled_items=unfulfilled,
        )

    @staticmethod
    def _validate_items(items: list[Item]) -> None:
        if not items:
            raise InvalidInputError("The shopping list is empty")
        for item in items:
            if not item.name.strip():
                raise InvalidInputError("Item names must not be blank")
            if item.quantity <= 0:
                raise InvalidInputError(
                    f"Quantity for {item.name!r} must be positive, got {item.quantity}"
                )

    @staticmethod
    def _validate_stores(stores: list[Store]) -> None:
        if not stores:
            raise InvalidInputError("The store catalog is empty")
        ids = [store.id for store in stores]
        if len(ids) != len(set(ids)):
            raise InvalidInputError("Store ids must be unique")
