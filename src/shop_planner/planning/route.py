"""Nearest-neighbour visit ordering."""

from __future__ import annotations

from typing import NamedTuple


class RouteLeg(NamedTuple):
    """One hop of a route: matrix index of the stop and minutes to reach it."""

    index: int
    minutes: float


class RouteSequencer:
    """Orders store visits greedily from the origin.

    Index 0 of the travel matrix is the origin.  At each step the closest
    unvisited stop is chosen; ties go to the stop nearer the origin, then
    to the lower index.  This is not an optimal tour, but it is O(n^2) and
    fine for the handful of stops in a weekly shop.
    """

    def sequence(self, matrix: list[list[float]]) -> list[RouteLeg]:
        unvisited = set(range(1, len(matrix)))
        current = 0
        legs: list[RouteLeg] = []

        while unvisited:
            nxt = min(
                unvisited,
                key=lambda j: (matrix[current][j], matrix[0][j], j),
            )
            legs.append(RouteLeg(index=nxt, minutes=matrix[current][nxt]))
            unvisited.remove(nxt)
            current = nxt

        return legs

    @staticmethod
    def total_minutes(legs: list[RouteLeg]) -> float:
        return sum(leg.minutes for leg in legs)
