"""Routing orchestration service."""

from __future__ import annotations

import logging
from typing import Sequence

from ...models.domain import Coordinates
from ...data.claims_repository import ClaimRepository
from ...persistence.database import save_route
from ...persistence.filesystem import FileStorage
from ...schemas.routing import (
    CoordinatesModel,
    ETAModel,
    RouteModel,
    RoutePlanRequest,
    RoutePlanResponse,
    StopModel,
)
from ..export.geojson import route_to_geojson, save_geojson
from ..outputs.routing_formatter import route_to_csv, route_to_json
from .builder import build_route, build_route_from_claims
from .eta import calculate_etas
from .geocoding_client import GeocodingClient
from .models import ETA, Route, Stop
from .optimizer import optimize_route

logger = logging.getLogger(__name__)


def coordinates_from_model(model: CoordinatesModel | None) -> Coordinates | None:
    if model is None:
        return None
    return Coordinates(latitude=model.latitude, longitude=model.longitude)


def route_to_model(route: Route) -> RouteModel:
    return RouteModel(
        id=route.id,
        date=route.date,
        total_distance_km=route.total_distance_km,
        estimated_duration_min=route.estimated_duration_min,
        optimized=route.optimized,
        stops=[
            StopModel(
                id=stop.id,
                claim_id=stop.claim_id,
                address=stop.address,
                coordinates=CoordinatesModel(
                    latitude=stop.coordinates.latitude,
                    longitude=stop.coordinates.longitude,
                )
                if stop.coordinates
                else None,
                order=stop.order,
                arrival_time=stop.arrival_time,
                departure_time=stop.departure_time,
            )
            for stop in route.stops
        ],
    )


def route_from_model(model: RouteModel) -> Route:
    return Route(
        id=model.id,
        date=model.date,
        total_distance_km=model.total_distance_km,
        estimated_duration_min=model.estimated_duration_min,
        optimized=model.optimized,
        stops=[
            Stop(
                id=stop.id,
                claim_id=stop.claim_id,
                address=stop.address,
                coordinates=coordinates_from_model(stop.coordinates),
                order=stop.order,
                arrival_time=stop.arrival_time,
                departure_time=stop.departure_time,
            )
            for stop in model.stops
        ],
    )


def etas_to_models(etas: Sequence[ETA]) -> list[ETAModel]:
    return [
        ETAModel(
            stop_id=eta.stop_id,
            estimated_arrival=eta.estimated_arrival,
            duration_from_previous_min=eta.duration_from_previous_min,
            distance_from_previous_km=eta.distance_from_previous_km,
        )
        for eta in etas
    ]


def plan_route(payload: RoutePlanRequest) -> RoutePlanResponse:
    """Build, sequence, time and optionally store a day's route.

    Without ``claim_ids`` the route covers the active claims that have a loss
    location; those that cannot be geocoded are left out.

    Raises:
        TypeError: malformed claim id list
        ValueError: invalid route date
        RuntimeError / store errors: when ``save`` is requested and the insert fails
    """
    repository = ClaimRepository()
    if payload.claim_ids is None:
        claims = repository.list_active_claims()
        requested = len(claims)
        source = "active_claims"
        route = build_route_from_claims(
            claims,
            geocoder=GeocodingClient(),
            route_date=payload.date,
            require_coordinates=True,
        )
    else:
        requested = len(payload.claim_ids)
        source = "claim_ids"
        route = build_route(
            payload.claim_ids,
            repository=repository,
            geocoder=GeocodingClient(),
            route_date=payload.date,
        )

    start = coordinates_from_model(payload.start)
    if start is not None:
        optimize_route(route, start)
    else:
        logger.info(f"No start location for route {route.id}; keeping input order")

    etas = calculate_etas(route, payload.start_time)
    plottable = route.has_plottable_stops
    if not plottable:
        logger.warning(f"Route {route.id} has no stops with coordinates")

    saved_route_id = save_route(route) if payload.save else None

    overlay = route_to_geojson(route)
    metadata = {
        "stop_count": len(route.stops),
        "plottable_stops": len(route.plottable_stops),
        "skipped_claims": requested - len(route.stops),
        "claim_source": source,
        "start": {"latitude": start.latitude, "longitude": start.longitude} if start else None,
        "map_overlay": overlay,
    }

    if payload.persist:
        storage = FileStorage()
        run_dir = storage.make_run_directory(prefix=f"route_{route.date}")
        storage.write_json(run_dir / "summary.json", route_to_json(route, etas))
        storage.write_csv(run_dir / "stops.csv", route_to_csv(route, etas))
        save_geojson(overlay, run_dir / "route.geojson")
        metadata["output_dir"] = str(run_dir)

    return RoutePlanResponse(
        route=route_to_model(route),
        etas=etas_to_models(etas),
        plottable=plottable,
        saved_route_id=saved_route_id,
        metadata=metadata,
    )
