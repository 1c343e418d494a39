"""Database persistence for planned routes."""

from __future__ import annotations

import logging
from typing import Any

from ..config import settings
from ..db.supabase import get_supabase_client
from ..services.outputs.routing_formatter import stop_from_dict, stop_to_dict
from ..services.routing.models import Route

logger = logging.getLogger(__name__)


def route_to_record(route: Route) -> dict[str, Any]:
    """Shape a route as a row of the routes table."""
    return {
        "date": route.date,
        "optimized_order": [stop.claim_id for stop in route.stops],
        "total_distance_km": route.total_distance_km,
        "estimated_duration_minutes": route.estimated_duration_min,
        "metadata": {
            "stops": [stop_to_dict(stop) for stop in route.stops],
            "optimized": route.optimized,
        },
    }


def route_from_record(record: dict[str, Any]) -> Route:
    """Rebuild a route from a stored row."""
    metadata = record.get("metadata") or {}
    stops = [stop_from_dict(item) for item in metadata.get("stops", [])]
    if not record.get("date"):
        raise ValueError(f"Stored route {record.get('id')!r} has no date")
    return Route(
        id=str(record["id"]),
        date=str(record["date"]),
        stops=stops,
        total_distance_km=float(record.get("total_distance_km") or 0.0),
        estimated_duration_min=int(record.get("estimated_duration_minutes") or 0),
        optimized=bool(metadata.get("optimized", False)),
    )


def save_route(route: Route) -> str:
    """Insert a route and return the id assigned by the database.

    Errors raised by the Supabase client are not caught.
    """
    supabase = get_supabase_client()
    if not supabase:
        raise RuntimeError(
            "Supabase is not configured. Set FIELDROUTE_SUPABASE_URL and FIELDROUTE_SUPABASE_KEY to save routes."
        )

    record = route_to_record(route)
    logger.info(f"Saving route {route.id} for {route.date} with {len(route.stops)} stops")

    response = supabase.table(settings.routes_table).insert(record).execute()
    if not response.data:
        raise RuntimeError(f"Insert into '{settings.routes_table}' returned no row for route {route.id}")

    route_id = str(response.data[0]["id"])
    logger.info(f"Saved route {route.id} as {route_id}")
    return route_id


def get_routes_from_database(route_date: str | None = None, limit: int = 50) -> list[dict[str, Any]]:
    """Retrieve saved routes, newest first.

    Args:
        route_date: Optional ISO date filter
        limit: Maximum number of rows

    Returns:
        List of route rows, empty when the database is unavailable
    """
    supabase = get_supabase_client()
    if not supabase:
        return []

    try:
        query = supabase.table(settings.routes_table).select("*")
        if route_date:
            query = query.eq("date", route_date)
        response = query.order("created_at", desc=True).limit(limit).execute()
        routes_data = response.data or []
        if routes_data:
            logger.info(f"Retrieved {len(routes_data)} routes from database (date={route_date})")
        return routes_data
    except Exception as e:
        logger.warning(f"Failed to retrieve routes from database: {e}")
        return []


def get_route_from_database(route_id: str) -> dict[str, Any] | None:
    supabase = get_supabase_client()
    if not supabase:
        return None

    try:
        response = supabase.table(settings.routes_table).select("*").eq("id", route_id).limit(1).execute()
    except Exception as e:
        logger.warning(f"Failed to retrieve route '{route_id}' from database: {e}")
        return None
    if not response.data:
        return None
    return response.data[0]
