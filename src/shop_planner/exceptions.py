"""Errors raised by the shopping planner.

Business outcomes such as an infeasible plan or an unaffordable shop are
reported on the returned plan; only malformed input is raised.
"""

from __future__ import annotations


class OptimizerError(Exception):
    """Base class for shopping planner errors."""


class InvalidInputError(OptimizerError):
    """Raised when the caller supplies structurally invalid input."""
