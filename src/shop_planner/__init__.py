"""Store-route optimizer for shopping lists."""

from shop_planner.exceptions import InvalidInputError, OptimizerError
from shop_planner.optimizer import ShoppingOptimizer

__all__ = ["InvalidInputError", "OptimizerError", "ShoppingOptimizer"]
