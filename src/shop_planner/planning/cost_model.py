"""Price estimation for items and per-store subtotals."""

from __future__ import annotations

from shop_planner.catalog import ReferenceTables
from shop_planner.models import Item, Store
from shop_planner.planning.availability import AvailabilityIndex


class CostModel:
    """Estimates prices in pence from category base prices.

    A store's price multiplier comes from its inventory record when one
    exists, otherwise from the store-name table (1.0 for unknown stores).
    """

    def __init__(
        self,
        tables: ReferenceTables,
        availability: AvailabilityIndex,
    ) -> None:
        self._tables = tables
        self._availability = availability

    def price_multiplier(self, store: Store) -> float:
        inventory = self._availability.inventory_for(store)
        if inventory is not None:
            return inventory.price_multiplier
        return self._tables.multiplier_for(store)

    def base_cost(self, item: Item) -> float:
        """Cost of *item* before any store multiplier is applied."""
        if item.estimated_cost is not None:
            return item.estimated_cost
        return self._tables.base_price(item.category) * max(1.0, item.quantity / 2)

    def estimate_item_cost(self, item: Item, store: Store) -> float:
        return self.base_cost(item) * self.price_multiplier(store)

    def estimate_store_subtotal(self, items: list[Item], store: Store) -> float:
        multiplier = self.price_multiplier(store)
        return round(sum(self.base_cost(item) * multiplier for item in items), 2)
