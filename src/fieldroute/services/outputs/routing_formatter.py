"""Serializers for routing outputs."""

from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Any, Sequence

from ...models.domain import Coordinates
from ..routing.models import ETA, Route, Stop


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def coordinates_to_dict(coordinates: Coordinates | None) -> dict | None:
    if coordinates is None:
        return None
    return {"latitude": coordinates.latitude, "longitude": coordinates.longitude}


def stop_to_dict(stop: Stop) -> dict:
    return {
        "id": stop.id,
        "claim_id": stop.claim_id,
        "address": stop.address,
        "coordinates": coordinates_to_dict(stop.coordinates),
        "order": stop.order,
        "arrival_time": _iso(stop.arrival_time),
        "departure_time": _iso(stop.departure_time),
    }


def stop_from_dict(data: dict) -> Stop:
    coords = data.get("coordinates")
    return Stop(
        id=str(data["id"]),
        claim_id=str(data["claim_id"]),
        address=data.get("address") or "",
        coordinates=Coordinates(float(coords["latitude"]), float(coords["longitude"])) if coords else None,
        order=int(data.get("order", 0)),
        arrival_time=_parse_datetime(data.get("arrival_time")),
        departure_time=_parse_datetime(data.get("departure_time")),
    )


def eta_to_dict(eta: ETA) -> dict:
    return {
        "stop_id": eta.stop_id,
        "estimated_arrival": eta.estimated_arrival.isoformat(),
        "duration_from_previous_min": eta.duration_from_previous_min,
        "distance_from_previous_km": eta.distance_from_previous_km,
    }


def route_to_json(route: Route, etas: Sequence[ETA] = ()) -> dict:
    return {
        "id": route.id,
        "date": route.date,
        "total_distance_km": route.total_distance_km,
        "estimated_duration_min": route.estimated_duration_min,
        "optimized": route.optimized,
        "stops": [stop_to_dict(stop) for stop in route.stops],
        "etas": [eta_to_dict(eta) for eta in etas],
    }


def route_to_csv(route: Route, etas: Sequence[ETA] = ()) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "route_id",
        "date",
        "order",
        "stop_id",
        "claim_id",
        "address",
        "latitude",
        "longitude",
        "estimated_arrival",
        "distance_from_prev_km",
        "duration_from_prev_min",
    ]
    eta_by_stop = {eta.stop_id: eta for eta in etas}
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for stop in route.stops:
        eta = eta_by_stop.get(stop.id)
        writer.writerow(
            {
                "route_id": route.id,
                "date": route.date,
                "order": stop.order,
                "stop_id": stop.id,
                "claim_id": stop.claim_id,
                "address": stop.address,
                "latitude": stop.coordinates.latitude if stop.coordinates else "",
                "longitude": stop.coordinates.longitude if stop.coordinates else "",
                "estimated_arrival": eta.estimated_arrival.isoformat() if eta else "",
                "distance_from_prev_km": eta.distance_from_previous_km if eta else "",
                "duration_from_prev_min": eta.duration_from_previous_min if eta else "",
            }
        )
    return buffer.getvalue()
