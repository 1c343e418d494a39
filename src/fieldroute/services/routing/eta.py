"""Arrival time estimation along an ordered route."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ..geospatial import distance, travel_minutes
from .models import ETA, Route, RoutingConfig


def calculate_etas(
    route: Route,
    start_time: datetime | None = None,
    *,
    config: RoutingConfig | None = None,
) -> list[ETA]:
    """Estimate arrival at each stop in the route's current order.

    Travel between stops uses a flat average speed; each visit then adds the
    dwell allowance before the next leg starts. Legs touching a stop without
    coordinates take no time. Stops get ``arrival_time`` and ``departure_time``.
    """
    config = config or RoutingConfig()
    clock = start_time or datetime.now(timezone.utc)
    dwell = timedelta(minutes=config.dwell_minutes)

    etas: list[ETA] = []
    previous = None
    for stop in route.stops:
        distance_km = 0.0
        duration_min = 0.0
        if previous is not None and previous.coordinates is not None and stop.coordinates is not None:
            distance_km = distance(previous.coordinates, stop.coordinates)
            duration_min = travel_minutes(distance_km, config.average_speed_kmh)

        clock = clock + timedelta(minutes=duration_min)
        etas.append(
            ETA(
                stop_id=stop.id,
                estimated_arrival=clock,
                duration_from_previous_min=duration_min,
                distance_from_previous_km=distance_km,
            )
        )
        stop.arrival_time = clock
        stop.departure_time = clock + dwell

        clock = clock + dwell
        previous = stop

    return etas
