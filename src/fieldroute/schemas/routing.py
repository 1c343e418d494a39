"""Routing request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..services.routing.models import normalize_route_date


class CoordinatesModel(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class StopModel(BaseModel):
    id: str
    claim_id: str
    address: str
    coordinates: Optional[CoordinatesModel] = None
    order: int = Field(..., ge=0)
    arrival_time: Optional[datetime] = None
    departure_time: Optional[datetime] = None


class RouteModel(BaseModel):
    id: str
    date: str
    stops: List[StopModel]
    total_distance_km: float = Field(..., ge=0)
    estimated_duration_min: int = Field(..., ge=0)
    optimized: bool = False

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: str) -> str:
        return normalize_route_date(value)


class ETAModel(BaseModel):
    stop_id: str
    estimated_arrival: datetime
    duration_from_previous_min: float
    distance_from_previous_km: float


class BuildRouteRequest(BaseModel):
    claim_ids: List[str] = Field(..., description="Claims to visit, in the order they were picked.")
    date: Optional[str] = Field(default=None, description="ISO date the route is planned for (defaults to today).")

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: Optional[str]) -> Optional[str]:
        return normalize_route_date(value) if value is not None else None


class OptimizeRouteRequest(BaseModel):
    route: RouteModel
    start: CoordinatesModel = Field(..., description="Where the adjuster starts the day.")


class EtaRequest(BaseModel):
    route: RouteModel
    start_time: Optional[datetime] = Field(default=None, description="Departure time (defaults to now, UTC).")


class EtaResponse(BaseModel):
    route_id: str
    etas: List[ETAModel]


class RoutePlanRequest(BaseModel):
    claim_ids: Optional[List[str]] = Field(
        default=None,
        description="Claims to visit. When omitted the day is planned from open and in-progress claims.",
    )
    date: Optional[str] = None
    start: Optional[CoordinatesModel] = Field(
        default=None,
        description="Starting location. Without it the stops keep their input order.",
    )
    start_time: Optional[datetime] = None
    save: bool = Field(default=False, description="Store the final route in the routes table.")
    persist: bool = Field(default=False, description="Write JSON/CSV/GeoJSON exports to the data root.")

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: Optional[str]) -> Optional[str]:
        return normalize_route_date(value) if value is not None else None


class RoutePlanResponse(BaseModel):
    route: RouteModel
    etas: List[ETAModel]
    plottable: bool = Field(..., description="False when no stop could be placed on the map.")
    saved_route_id: Optional[str] = None
    metadata: dict


class SaveRouteResponse(BaseModel):
    route_id: str
