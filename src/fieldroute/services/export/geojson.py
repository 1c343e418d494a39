"""GeoJSON export utilities for the map screen."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from ..routing.models import Route


def linestring_to_wkt(coordinates: List[List[float]]) -> str:
    """Convert linestring coordinates to WKT format.

    Args:
        coordinates: List of [lat, lon] pairs

    Returns:
        WKT LINESTRING string
    """
    if not coordinates or len(coordinates) < 2:
        raise ValueError("LineString must have at least 2 coordinates")

    # WKT uses lon,lat order (x,y)
    coord_pairs = [f"{lon} {lat}" for lat, lon in coordinates]
    return f"LINESTRING({','.join(coord_pairs)})"


def route_to_geojson(route: Route) -> Dict[str, Any]:
    """Convert a route into a FeatureCollection of stop points and the travel path.

    Stops without coordinates are left off the map; the path joins the remaining
    stops in route order and is only emitted when at least two are plottable.
    """
    features: List[Dict[str, Any]] = []
    path: List[List[float]] = []

    for stop in route.stops:
        if stop.coordinates is None:
            continue
        lon_lat = [stop.coordinates.longitude, stop.coordinates.latitude]
        path.append(lon_lat)
        features.append(
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": lon_lat},
                "properties": {
                    "stop_id": stop.id,
                    "claim_id": stop.claim_id,
                    "address": stop.address,
                    "order": stop.order,
                    "arrival_time": stop.arrival_time.isoformat() if stop.arrival_time else None,
                },
            }
        )

    if len(path) >= 2:
        features.append(
            {
                "type": "Feature",
                "geometry": {"type": "LineString", "coordinates": path},
                "properties": {
                    "route_id": route.id,
                    "date": route.date,
                    "total_distance_km": round(route.total_distance_km, 3),
                    "estimated_duration_min": route.estimated_duration_min,
                    "optimized": route.optimized,
                    "wkt": linestring_to_wkt([[lat, lon] for lon, lat in path]),
                },
            }
        )

    return {"type": "FeatureCollection", "features": features}


def save_geojson(feature_collection: Dict[str, Any], output_path: Path) -> None:
    """Save a FeatureCollection to disk."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(feature_collection, f, indent=2, ensure_ascii=False)
