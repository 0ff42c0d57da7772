"""Per-store stock lookup with fuzzy name matching."""

from __future__ import annotations

from collections.abc import Iterable

from shop_planner.catalog import store_key
from shop_planner.models import Item, StockLevel, Store, StoreInventory


class AvailabilityIndex:
    """Answers "can this store supply this item?".

    A store with no inventory record is assumed to stock everything.
    Otherwise an item is available when its name equals, contains, or is
    contained in one of the store's stocked names (case-insensitive).
    """

    def __init__(self, inventories: Iterable[StoreInventory]) -> None:
        self._inventories: dict[str, StoreInventory] = {}
        self._names: dict[str, frozenset[str]] = {}
        for inventory in inventories:
            key = store_key(inventory.store_id)
            self._inventories[key] = inventory
            self._names[key] = frozenset(
                name.strip().lower() for name in inventory.available_item_names
            )

    def _key_for(self, store: Store) -> str | None:
        for key in (store_key(store.id), store_key(store.name)):
            if key in self._inventories:
                return key
        return None

    def inventory_for(self, store: Store) -> StoreInventory | None:
        key = self._key_for(store)
        return self._inventories[key] if key is not None else None

    def is_available(self, item: Item, store: Store) -> bool:
        key = self._key_for(store)
        if key is None:
            return True

        name = item.name.strip().lower()
        return any(
            name == stocked or stocked in name or name in stocked
            for stocked in self._names[key]
        )

    def items_available_at(self, items: list[Item], store: Store) -> list[Item]:
        return [item for item in items if self.is_available(item, store)]

    def stock_level(self, item: Item, store: Store) -> StockLevel | None:
        """Return the recorded stock level for *item*, if any."""
        inventory = self.inventory_for(store)
        if inventory is None:
            return None

        name = item.name.strip().lower()
        for stocked, level in inventory.stock_levels.items():
            stocked = stocked.lower()
            if name == stocked or stocked in name or name in stocked:
                return level
        return None
