"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import List, Optional

from ...config import settings
from ...models.domain import Coordinates


@dataclass(slots=True)
class RoutingConfig:
    """Travel assumptions shared by the builder, optimizer and ETA calculator."""

    average_speed_kmh: float = settings.average_speed_kmh
    dwell_minutes: float = settings.dwell_minutes

    def __post_init__(self) -> None:
        if self.average_speed_kmh <= 0:
            raise ValueError("average_speed_kmh must be positive")
        if self.dwell_minutes < 0:
            raise ValueError("dwell_minutes cannot be negative")


@dataclass(slots=True)
class Stop:
    id: str
    claim_id: str
    address: str
    coordinates: Optional[Coordinates]
    order: int
    arrival_time: Optional[datetime] = None
    departure_time: Optional[datetime] = None

    @property
    def plottable(self) -> bool:
        return self.coordinates is not None


@dataclass(slots=True)
class Route:
    id: str
    date: str
    stops: List[Stop]
    total_distance_km: float
    estimated_duration_min: int
    optimized: bool = False

    @property
    def plottable_stops(self) -> List[Stop]:
        return [stop for stop in self.stops if stop.coordinates is not None]

    @property
    def has_plottable_stops(self) -> bool:
        return any(stop.coordinates is not None for stop in self.stops)


@dataclass(frozen=True, slots=True)
class ETA:
    stop_id: str
    estimated_arrival: datetime
    duration_from_previous_min: float
    distance_from_previous_km: float


def today_iso() -> str:
    """Current calendar date in UTC."""
    return datetime.now(timezone.utc).date().isoformat()


def normalize_route_date(value: str) -> str:
    """Return ``value`` as a YYYY-MM-DD string, raising ValueError for anything else."""
    try:
        return date.fromisoformat(value).isoformat()
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Route date must be an ISO date (YYYY-MM-DD), got {value!r}") from exc
