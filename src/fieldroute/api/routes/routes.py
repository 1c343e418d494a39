"""Route planning endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, status

from ...persistence.database import (
    get_route_from_database,
    get_routes_from_database,
    route_from_record,
    save_route,
)
from ...schemas.routing import (
    BuildRouteRequest,
    EtaRequest,
    EtaResponse,
    OptimizeRouteRequest,
    RouteModel,
    RoutePlanRequest,
    RoutePlanResponse,
    SaveRouteResponse,
)
from ...services.routing import service as routing_service
from ...services.routing.builder import build_route
from ...services.routing.eta import calculate_etas
from ...services.routing.optimizer import optimize_route

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/build", response_model=RouteModel, status_code=status.HTTP_200_OK)
def build(payload: BuildRouteRequest) -> RouteModel:
    try:
        route = build_route(
            payload.claim_ids,
            repository=routing_service.ClaimRepository(),
            geocoder=routing_service.GeocodingClient(),
            route_date=payload.date,
        )
        return routing_service.route_to_model(route)
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error building route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to build route: {str(exc)}",
        ) from exc


@router.post("/optimize", response_model=RouteModel, status_code=status.HTTP_200_OK)
def optimize(payload: OptimizeRouteRequest) -> RouteModel:
    try:
        route = routing_service.route_from_model(payload.route)
        start = routing_service.coordinates_from_model(payload.start)
        return routing_service.route_to_model(optimize_route(route, start))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error optimizing route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize route: {str(exc)}",
        ) from exc


@router.post("/etas", response_model=EtaResponse, status_code=status.HTTP_200_OK)
def etas(payload: EtaRequest) -> EtaResponse:
    try:
        route = routing_service.route_from_model(payload.route)
        return EtaResponse(
            route_id=route.id,
            etas=routing_service.etas_to_models(calculate_etas(route, payload.start_time)),
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error calculating ETAs: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to calculate ETAs: {str(exc)}",
        ) from exc


@router.post("/plan", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def plan(payload: RoutePlanRequest) -> RoutePlanResponse:
    try:
        return routing_service.plan_route(payload)
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error planning route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to plan route: {str(exc)}",
        ) from exc


@router.post("/save", response_model=SaveRouteResponse, status_code=status.HTTP_201_CREATED)
def save(payload: RouteModel) -> SaveRouteResponse:
    try:
        route = routing_service.route_from_model(payload)
        return SaveRouteResponse(route_id=save_route(route))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error saving route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save route: {str(exc)}",
        ) from exc


@router.get("/from-database", response_model=list[RouteModel], status_code=status.HTTP_200_OK)
def list_routes(
    date: str | None = Query(default=None, description="Filter routes by ISO date"),
    limit: int = Query(default=50, ge=1, le=500),
) -> list[RouteModel]:
    """Saved routes, newest first, in the same shape the planner returns."""
    records = get_routes_from_database(route_date=date, limit=limit)
    return [routing_service.route_to_model(route_from_record(record)) for record in records]


@router.get("/{route_id}", response_model=RouteModel, status_code=status.HTTP_200_OK)
def get_route(route_id: str) -> RouteModel:
    record = get_route_from_database(route_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Route {route_id} not found")
    return routing_service.route_to_model(route_from_record(record))
