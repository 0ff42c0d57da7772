"""Multi-criteria store ranking."""

from __future__ import annotations

import math

from shop_planner.catalog import store_key
from shop_planner.models import Constraints, Item, Store, StoreRecommendation
from shop_planner.planning.cost_model import CostModel

_DEFAULT_RATING = 3
_PREFERRED_STORE_BONUS = 25.0
_TIME_HORIZON_MIN = 30.0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class RecommendationScorer:
    """Combines price, travel time, preference, availability and rating.

    Score components:
    - price:        ``(2.0 - multiplier) * 50``, only when price is weighted
    - time:         ``max(0, 30 - travel minutes)``, only when time is weighted
    - preference:   ``+25`` for stores listed in ``preferred_stores``
    - availability: ``+2`` per item the store can supply
    - rating:       ``+5`` per rating star (3 when unknown)
    """

    def __init__(self, cost_model: CostModel) -> None:
        self._cost_model = cost_model

    def score(
        self,
        store: Store,
        assigned_items: list[Item],
        constraints: Constraints,
        travel_minutes: float,
    ) -> int:
        weights = constraints.objective_weights
        score = 0.0

        if weights.price > 0:
            multiplier = self._cost_model.price_multiplier(store)
            score += weights.price * (2.0 - multiplier) * 50

        if weights.time > 0:
            score += weights.time * max(0.0, _TIME_HORIZON_MIN - travel_minutes)

        if self._is_preferred(store, constraints):
            score += weights.preference * _PREFERRED_STORE_BONUS

        score += weights.availability * 2 * len(assigned_items)
        score += 5 * (store.rating or _DEFAULT_RATING)

        return _round_half_up(score)

    @staticmethod
    def _is_preferred(store: Store, constraints: Constraints) -> bool:
        preferred = {store_key(s) for s in constraints.preferred_stores}
        return store_key(store.id) in preferred or store_key(store.name) in preferred

    @staticmethod
    def rank(recommendations: list[StoreRecommendation]) -> list[StoreRecommendation]:
        """Sort by descending score, breaking ties by store id."""
        return sorted(recommendations, key=lambda r: (-r.priority_score, r.store.id))
