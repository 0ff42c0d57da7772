"""Keyword-based item categorisation."""

from __future__ import annotations

from shop_planner.models import Item, ItemCategory

# Checked in order; the first category with a matching keyword wins
_CATEGORY_KEYWORDS: tuple[tuple[ItemCategory, tuple[str, ...]], ...] = (
    (ItemCategory.MEAT, ("chicken", "beef", "pork", "fish", "lamb", "turkey")),
    (ItemCategory.DAIRY, ("milk", "cheese", "yogurt", "butter", "cream", "eggs")),
    (ItemCategory.PRODUCE, ("tomato", "onion", "carrot", "potato", "apple", "banana")),
    (ItemCategory.PANTRY, ("rice", "pasta", "flour", "oil", "salt", "sugar")),
    (ItemCategory.FROZEN, ("frozen", "ice cream", "frozen peas")),
    (ItemCategory.BAKERY, ("bread", "rolls", "cake", "pastry")),
    (ItemCategory.BEVERAGES, ("juice", "soda", "water", "tea", "coffee")),
)


class ItemClassifier:
    """Assigns a grocery category to raw item names."""

    def categorize(self, name: str) -> ItemCategory:
        lowered = name.lower()
        for category, keywords in _CATEGORY_KEYWORDS:
            if any(keyword in lowered for keyword in keywords):
                return category
        return ItemCategory.OTHER

    def classify(self, item: Item) -> Item:
        """Return *item* with its category filled in.

        Items that already carry a category are returned unchanged.
        """
        if item.category is not None:
            return item
        return item.model_copy(update={"category": self.categorize(item.name)})

    def classify_all(self, items: list[Item]) -> list[Item]:
        return [self.classify(item) for item in items]
