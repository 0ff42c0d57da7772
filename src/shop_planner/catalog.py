"""Reference tables for price and travel estimation.

The module-level tables are defaults only.  Components receive a
:class:`ReferenceTables` instance at construction time so callers and
tests can substitute their own figures.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from shop_planner.models import (
    ItemCategory,
    Store,
    StockLevel,
    StoreInventory,
)

# Base price per category, in pence
CATEGORY_BASE_PRICES: dict[ItemCategory, float] = {
    ItemCategory.MEAT: 800.0,
    ItemCategory.DAIRY: 250.0,
    ItemCategory.PRODUCE: 200.0,
    ItemCategory.PANTRY: 150.0,
    ItemCategory.FROZEN: 300.0,
    ItemCategory.BAKERY: 120.0,
    ItemCategory.BEVERAGES: 200.0,
    ItemCategory.OTHER: 250.0,
}

# Keyed by normalised store name (see ``store_key``)
STORE_PRICE_MULTIPLIERS: dict[str, float] = {
    "aldi": 0.85,
    "lidl": 0.87,
    "tesco": 1.0,
    "sainsburys": 1.05,
    "waitrose": 1.25,
    "marks & spencer": 1.3,
    "premier": 1.15,
    "university-superstore": 1.1,
}

# Average door-to-door minutes from home
STORE_TRAVEL_MINUTES: dict[str, float] = {
    "aldi": 15.0,
    "tesco": 20.0,
    "sainsburys": 25.0,
    "premier": 10.0,
    "university-superstore": 5.0,
    "lidl": 18.0,
    "waitrose": 30.0,
}


def store_key(name: str) -> str:
    """Normalise a store name or id for table lookups.

    ``"Sainsbury's"`` and ``"sainsburys"`` map to the same key.
    """
    return name.strip().lower().replace("'", "").replace("’", "")


class ReferenceTables(BaseModel):
    """Injectable price and travel-time tables."""

    base_prices: dict[ItemCategory, float] = Field(
        default_factory=lambda: dict(CATEGORY_BASE_PRICES)
    )
    store_multipliers: dict[str, float] = Field(
        default_factory=lambda: dict(STORE_PRICE_MULTIPLIERS)
    )
    store_travel_minutes: dict[str, float] = Field(
        default_factory=lambda: dict(STORE_TRAVEL_MINUTES)
    )

    def base_price(self, category: ItemCategory | None) -> float:
        table = self.base_prices
        if category is not None and category in table:
            return table[category]
        return table.get(ItemCategory.OTHER, CATEGORY_BASE_PRICES[ItemCategory.OTHER])

    def multiplier_for(self, store: Store) -> float:
        for key in (store_key(store.name), store_key(store.id)):
            if key in self.store_multipliers:
                return self.store_multipliers[key]
        return 1.0

    def travel_minutes_for(self, store_name: str, store_id: str) -> float | None:
        for key in (store_key(store_name), store_key(store_id)):
            if key in self.store_travel_minutes:
                return self.store_travel_minutes[key]
        return None


def default_inventories() -> list[StoreInventory]:
    """Known stock for the local discount and mid-range supermarkets."""
    return [
        StoreInventory(
            store_id="aldi",
            available_item_names={
                "bread", "milk", "eggs", "chicken", "vegetables", "pasta", "rice",
            },
            price_multiplier=0.85,
            stock_levels={
                "bread": StockLevel.HIGH,
                "milk": StockLevel.HIGH,
                "eggs": StockLevel.MEDIUM,
                "chicken": StockLevel.HIGH,
            },
        ),
        StoreInventory(
            store_id="tesco",
            available_item_names={
                "bread", "milk", "eggs", "chicken", "vegetables", "pasta", "rice",
                "cheese", "fish",
            },
            price_multiplier=1.0,
            stock_levels={
                "bread": StockLevel.HIGH,
                "milk": StockLevel.HIGH,
                "eggs": StockLevel.HIGH,
                "chicken": StockLevel.HIGH,
            },
        ),
        StoreInventory(
            store_id="sainsburys",
            available_item_names={
                "bread", "milk", "eggs", "chicken", "vegetables", "pasta", "rice",
                "cheese", "fish", "organic",
            },
            price_multiplier=1.05,
            stock_levels={
                "bread": StockLevel.HIGH,
                "milk": StockLevel.HIGH,
                "eggs": StockLevel.HIGH,
                "chicken": StockLevel.MEDIUM,
            },
        ),
    ]
