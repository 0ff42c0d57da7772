"""Budget and travel-time admission over a ranked store list."""

from __future__ import annotations

from pydantic import BaseModel, Field

from shop_planner.models import Constraints, StoreRecommendation
from shop_planner.planning.cost_model import CostModel


class ConstraintOutcome(BaseModel):
    """Stores that passed the constraints and why others did not."""

    admitted: list[StoreRecommendation] = Field(default_factory=list)
    over_budget: bool = False
    rejected_for_time: list[str] = Field(default_factory=list)
    rejected_for_budget: list[str] = Field(default_factory=list)


class ConstraintFilter:
    """Trims a ranked recommendation list to the caller's limits.

    Each incoming recommendation lists everything its store stocks.  Stores
    beyond ``max_travel_time`` are dropped first.  The rest are visited in
    rank order and take the items no earlier admitted store has taken;
    their subtotal is priced over those items only.  A store is admitted
    while the running total stays within ``max_budget``.  A store that would
    overshoot is skipped, leaving its items for later, cheaper stores.
    Stores left with nothing to buy are dropped.

    ``over_budget`` is set only when the budget cost the plan something:
    an item a skipped store could have supplied ended up unassigned.
    """

    def __init__(self, cost_model: CostModel) -> None:
        self._cost_model = cost_model

    def apply(
        self,
        recommendations: list[StoreRecommendation],
        constraints: Constraints,
    ) -> ConstraintOutcome:
        outcome = ConstraintOutcome()
        candidates = list(recommendations)

        if constraints.max_travel_time is not None:
            limit = constraints.max_travel_time
            outcome.rejected_for_time = [
                r.store.id for r in candidates if r.travel_time_min > limit
            ]
            candidates = [r for r in candidates if r.travel_time_min <= limit]

        budget = constraints.max_budget
        assigned: set[int] = set()
        skipped_items: list[int] = []
        running_total = 0.0

        for rec in candidates:
            remaining = [item for item in rec.items if id(item) not in assigned]
            if not remaining:
                continue

            subtotal = self._cost_model.estimate_store_subtotal(remaining, rec.store)
            if budget is not None and running_total + subtotal > budget:
                outcome.rejected_for_budget.append(rec.store.id)
                skipped_items.extend(id(item) for item in remaining)
                continue

            running_total += subtotal
            assigned.update(id(item) for item in remaining)
            outcome.admitted.append(
                rec.model_copy(update={"items": remaining, "subtotal": subtotal})
            )

        outcome.over_budget = any(key not in assigned for key in skipped_items)
        return outcome
