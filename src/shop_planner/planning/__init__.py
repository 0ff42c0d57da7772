"""Pure planning components: classification, pricing, search and routing."""

from shop_planner.planning.availability import AvailabilityIndex
from shop_planner.planning.classifier import ItemClassifier
from shop_planner.planning.combination import CombinationResult, CombinationSearch
from shop_planner.planning.constraints import ConstraintFilter, ConstraintOutcome
from shop_planner.planning.cost_model import CostModel
from shop_planner.planning.route import RouteLeg, RouteSequencer
from shop_planner.planning.scorer import RecommendationScorer

__all__ = [
    "AvailabilityIndex",
    "CombinationResult",
    "CombinationSearch",
    "ConstraintFilter",
    "ConstraintOutcome",
    "CostModel",
    "ItemClassifier",
    "RecommendationScorer",
    "RouteLeg",
    "RouteSequencer",
]
