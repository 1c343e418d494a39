"""Nearest-neighbor stop sequencing."""

from __future__ import annotations

import logging
import math
from typing import Sequence

from ...models.domain import Coordinates
from ..geospatial import distance
from .builder import summarize
from .models import Route, RoutingConfig, Stop

logger = logging.getLogger(__name__)


def tour_length_km(stops: Sequence[Stop], start: Coordinates) -> float:
    """Length of start -> stops[0] -> ... travelling only between located stops.

    A stop without coordinates does not move the traveller, matching how the
    nearest-neighbor cursor treats it.
    """
    total = 0.0
    previous = start
    for stop in stops:
        if stop.coordinates is not None:
            total += distance(previous, stop.coordinates)
            previous = stop.coordinates
    return total


def _nearest_neighbor(stops: Sequence[Stop], start: Coordinates) -> list[Stop]:
    remaining = list(stops)
    ordered: list[Stop] = []
    current = start

    while remaining:
        nearest_index = 0
        nearest_distance = math.inf
        for index, stop in enumerate(remaining):
            if stop.coordinates is None:
                continue
            candidate = distance(current, stop.coordinates)
            # strict comparison: the first of equally distant stops wins
            if candidate < nearest_distance:
                nearest_distance = candidate
                nearest_index = index

        nearest = remaining.pop(nearest_index)
        ordered.append(nearest)
        if nearest.coordinates is not None:
            current = nearest.coordinates

    return ordered


def optimize(stops: Sequence[Stop], start: Coordinates) -> list[Stop]:
    """Reorder stops greedily, always travelling to the closest unvisited stop.

    Stops without coordinates are visited only once every located stop has been
    taken. The result is never longer than the input order; when the input is
    already shorter it is kept as is. Each stop's ``order`` is set to its new index.
    """
    if len(stops) <= 2:
        return list(stops)

    ordered = _nearest_neighbor(stops, start)
    if tour_length_km(stops, start) < tour_length_km(ordered, start):
        logger.debug("Input order beats nearest-neighbor tour; keeping input order")
        ordered = list(stops)

    for position, stop in enumerate(ordered):
        stop.order = position
    return ordered


def optimize_route(route: Route, start: Coordinates, *, config: RoutingConfig | None = None) -> Route:
    """Optimize a route in place and refresh its distance and duration for the new order."""
    before = route.total_distance_km
    route.stops = optimize(route.stops, start)
    route.total_distance_km, route.estimated_duration_min = summarize(route.stops, config)
    route.optimized = True
    logger.info(
        f"Optimized route {route.id}: {len(route.stops)} stops, "
        f"{before:.2f} km -> {route.total_distance_km:.2f} km"
    )
    return route
