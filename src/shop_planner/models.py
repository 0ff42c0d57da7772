"""Pydantic models for the shopping planner.

Covers shopping items, stores and their inventories, travel facts,
optimization constraints, and the recommendation / plan records returned
to callers.
"""

from __future__ import annotations

import enum
from datetime import date

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ItemCategory(str, enum.Enum):
    """Closed set of grocery categories used for price estimation."""

    MEAT = "meat"
    DAIRY = "dairy"
    PRODUCE = "produce"
    PANTRY = "pantry"
    FROZEN = "frozen"
    BAKERY = "bakery"
    BEVERAGES = "beverages"
    OTHER = "other"


class ItemPriority(str, enum.Enum):
    ESSENTIAL = "essential"
    PREFERRED = "preferred"
    OPTIONAL = "optional"


class PriceLevel(str, enum.Enum):
    BUDGET = "budget"
    MID = "mid"
    PREMIUM = "premium"


class StockLevel(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TravelMethod(str, enum.Enum):
    WALK = "walk"
    BIKE = "bike"
    TRAIN = "train"


class TravelSource(str, enum.Enum):
    """Where a travel fact came from."""

    SERVICE = "service"
    FALLBACK = "fallback"


class PlanStatus(str, enum.Enum):
    """Outcome of an optimization call."""

    COMPLETE = "complete"
    PARTIAL = "partial"
    CONSTRAINT_UNSATISFIABLE = "constraint_unsatisfiable"


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


class Item(BaseModel):
    """A single line on the shopping list."""

    model_config = ConfigDict(frozen=True)

    name: str
    quantity: float = 1.0
    unit: str = "item"
    category: ItemCategory | None = None
    priority: ItemPriority = ItemPriority.ESSENTIAL
    estimated_cost: float | None = None


# ---------------------------------------------------------------------------
# Stores and locations
# ---------------------------------------------------------------------------


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class TimeSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    open: str
    close: str


class OpeningHours(BaseModel):
    model_config = ConfigDict(frozen=True)

    monday: TimeSlot | None = None
    tuesday: TimeSlot | None = None
    wednesday: TimeSlot | None = None
    thursday: TimeSlot | None = None
    friday: TimeSlot | None = None
    saturday: TimeSlot | None = None
    sunday: TimeSlot | None = None


class Store(BaseModel):
    """Reference data for a candidate store, supplied by the caller."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    coordinates: Coordinates | None = None
    price_level: PriceLevel = PriceLevel.MID
    rating: float | None = Field(default=None, ge=1, le=5)
    opening_hours: OpeningHours = Field(default_factory=OpeningHours)
    metadata: dict[str, str] = Field(default_factory=dict)


class Location(BaseModel):
    """A point travel can start from or arrive at."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    coordinates: Coordinates | None = None
    kind: str = "other"

    @classmethod
    def for_store(cls, store: Store) -> Location:
        return cls(
            id=store.id,
            name=store.name,
            coordinates=store.coordinates,
            kind="store",
        )


class StoreInventory(BaseModel):
    """What a store stocks and how its prices compare to the baseline."""

    store_id: str
    available_item_names: set[str] = Field(default_factory=set)
    price_multiplier: float = 1.0
    stock_levels: dict[str, StockLevel] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Travel
# ---------------------------------------------------------------------------


class TravelFact(BaseModel):
    """Distance, duration and cost of one leg."""

    origin_id: str
    destination_id: str
    method: TravelMethod = TravelMethod.WALK
    distance_m: float = 0.0
    duration_min: float
    cost_pence: int = 0
    source: TravelSource = TravelSource.SERVICE


class WeatherData(BaseModel):
    day: date
    temperature: float
    condition: str = "cloudy"
    precipitation_chance: int = 0
    wind_speed: float = 0.0


# ---------------------------------------------------------------------------
# Constraints
# ---------------------------------------------------------------------------


class ObjectiveWeights(BaseModel):
    """Relative weight of each scoring term.

    Price and time terms are off unless given a positive weight.
    """

    price: float = 0.0
    time: float = 0.0
    preference: float = 1.0
    availability: float = 1.0


class Constraints(BaseModel):
    """Optional limits on an optimization call; ``None`` means unconstrained."""

    max_budget: float | None = None
    max_travel_time: float | None = None
    preferred_stores: set[str] = Field(default_factory=set)
    objective_weights: ObjectiveWeights = Field(default_factory=ObjectiveWeights)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class StoreRecommendation(BaseModel):
    """Items to buy at one store, with its cost and travel time."""

    store: Store
    items: list[Item] = Field(default_factory=list)
    subtotal: float = 0.0
    travel_time_min: float = 0.0
    priority_score: int = 0


class OptimizedShoppingList(BaseModel):
    """A shopping plan across one or more stores.

    ``unfulfilled_items`` lists every requested item that no returned store
    covers; ``over_budget`` is set when the budget excluded at least one
    candidate store.
    """

    items: list[Item] = Field(default_factory=list)
    stores: list[StoreRecommendation] = Field(default_factory=list)
    total_estimated_cost: float = 0.0
    estimated_time_min: float = 0.0
    status: PlanStatus = PlanStatus.COMPLETE
    unfulfilled_items: list[Item] = Field(default_factory=list)
    over_budget: bool = False
    suggestion: OptimizedShoppingList | None = None


class ItemAlternative(BaseModel):
    item: str
    store_id: str
    store_name: str


class StoreBreakdown(BaseModel):
    """What a single store can and cannot supply from a list."""

    store: Store
    available_items: list[Item] = Field(default_factory=list)
    unavailable_items: list[Item] = Field(default_factory=list)
    low_stock_items: list[str] = Field(default_factory=list)
    estimated_cost: float = 0.0
    estimated_shopping_time_min: float = 0.0
    alternatives: list[ItemAlternative] = Field(default_factory=list)


# Rebuild forward references so the self-referencing plan resolves
OptimizedShoppingList.model_rebuild()
