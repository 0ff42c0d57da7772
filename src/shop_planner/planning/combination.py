"""Bounded store-subset search for the cheapest basket.

Every subset of up to ``max_stores`` stores is evaluated, which costs
``sum(C(n, k) for k in 1..K) * m`` item lookups.  ``K`` is capped (3 by
default) and catalogs are capped by the caller so this stays tractable.
"""

from __future__ import annotations

from itertools import combinations

import structlog
from pydantic import BaseModel, Field

from shop_planner.exceptions import InvalidInputError
from shop_planner.models import Item, Store, StoreRecommendation
from shop_planner.planning.availability import AvailabilityIndex
from shop_planner.planning.cost_model import CostModel

logger = structlog.get_logger(__name__)

MAX_COMBINATION_SIZE = 3


class CombinationResult(BaseModel):
    """Best subset found by :class:`CombinationSearch`."""

    recommendations: list[StoreRecommendation] = Field(default_factory=list)
    unfulfilled_items: list[Item] = Field(default_factory=list)
    total_cost: float = 0.0
    subsets_evaluated: int = 0
    largest_subset_size: int = 0

    @property
    def feasible(self) -> bool:
        return not self.unfulfilled_items


class _Candidate(BaseModel):
    assignment: dict[str, list[int]]
    missing: list[int]
    total: float


class CombinationSearch:
    """Finds the cheapest subset of at most ``K`` stores covering a list.

    Within a subset each item goes to the cheapest store that stocks it.
    This is cheapest-per-item within the subset, not a global matching,
    which is exact here because store subtotals are additive per item.
    """

    def __init__(
        self,
        cost_model: CostModel,
        availability: AvailabilityIndex,
        max_size: int = MAX_COMBINATION_SIZE,
    ) -> None:
        self._cost_model = cost_model
        self._availability = availability
        self._max_size = max_size

    def search(
        self,
        items: list[Item],
        stores: list[Store],
        max_stores: int = MAX_COMBINATION_SIZE,
        allow_partial: bool = False,
    ) -> CombinationResult:
        """Evaluate all subsets of size ``1..max_stores``.

        Subsets that leave items uncovered are rejected unless
        *allow_partial* is set, in which case the subset covering the most
        items (then the cheapest) is returned when no full cover exists.
        Ties keep the first subset seen; stores are visited in id order so
        the result does not depend on the order of *stores*.
        """
        if max_stores < 1 or max_stores > self._max_size:
            raise InvalidInputError(
                f"max_stores must be between 1 and {self._max_size}, got {max_stores}"
            )

        ordered = sorted(stores, key=lambda s: s.id)
        # costs[store_id][i] is None when the store cannot supply item i
        costs: dict[str, list[float | None]] = {
            store.id: [
                self._cost_model.estimate_item_cost(item, store)
                if self._availability.is_available(item, store)
                else None
                for item in items
            ]
            for store in ordered
        }

        best_full: _Candidate | None = None
        best_partial: _Candidate | None = None
        evaluated = 0
        largest = 0

        for size in range(1, min(max_stores, len(ordered)) + 1):
            for subset in combinations(ordered, size):
                evaluated += 1
                largest = size
                candidate = self._assign(items, subset, costs)

                if not candidate.missing:
                    if best_full is None or candidate.total < best_full.total:
                        best_full = candidate
                elif allow_partial and self._better_partial(candidate, best_partial):
                    best_partial = candidate

        chosen = best_full or best_partial
        if chosen is None:
            logger.info(
                "combination_search_infeasible",
                items=len(items),
                stores=len(ordered),
                subsets=evaluated,
            )
            return CombinationResult(
                unfulfilled_items=list(items),
                subsets_evaluated=evaluated,
                largest_subset_size=largest,
            )

        by_id = {store.id: store for store in ordered}
        recommendations = [
            StoreRecommendation(
                store=by_id[store_id],
                items=[items[i] for i in indices],
                subtotal=self._cost_model.estimate_store_subtotal(
                    [items[i] for i in indices], by_id[store_id]
                ),
            )
            for store_id, indices in chosen.assignment.items()
        ]
        total = round(sum(r.subtotal for r in recommendations), 2)

        logger.info(
            "combination_search_complete",
            subsets=evaluated,
            stores_used=len(recommendations),
            total=total,
            unfulfilled=len(chosen.missing),
        )
        return CombinationResult(
            recommendations=recommendations,
            unfulfilled_items=[items[i] for i in chosen.missing],
            total_cost=total,
            subsets_evaluated=evaluated,
            largest_subset_size=largest,
        )

    def _assign(
        self,
        items: list[Item],
        subset: tuple[Store, ...],
        costs: dict[str, list[float | None]],
    ) -> _Candidate:
        assignment: dict[str, list[int]] = {}
        missing: list[int] = []

        for i in range(len(items)):
            best_store: Store | None = None
            best_cost = 0.0
            for store in subset:
                cost = costs[store.id][i]
                if cost is not None and (best_store is None or cost < best_cost):
                    best_store, best_cost = store, cost
            if best_store is None:
                missing.append(i)
            else:
                assignment.setdefault(best_store.id, []).append(i)

        total = round(
            sum(
                self._cost_model.estimate_store_subtotal(
                    [items[i] for i in indices],
                    next(s for s in subset if s.id == store_id),
                )
                for store_id, indices in assignment.items()
            ),
            2,
        )
        # Keep subset order so recommendations follow store id order
        ordered_assignment = {
            s.id: assignment[s.id] for s in subset if s.id in assignment
        }
        return _Candidate(assignment=ordered_assignment, missing=missing, total=total)

    @staticmethod
    def _better_partial(candidate: _Candidate, current: _Candidate | None) -> bool:
        if current is None:
            return True
        if len(candidate.missing) != len(current.missing):
            return len(candidate.missing) < len(current.missing)
        return candidate.total < current.total
