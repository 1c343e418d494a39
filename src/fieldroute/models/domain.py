"""Domain models for claim locations."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True, slots=True)
class Coordinates:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude {self.latitude} is outside [-90, 90].")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude {self.longitude} is outside [-180, 180].")

    def as_tuple(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(slots=True)
class ClaimRecord:
    """Location-relevant fields of a claim row."""

    claim_id: str
    claim_number: Optional[str] = None
    loss_location: Optional[str] = None
    property_address: Optional[dict[str, Any]] = None
    raw: dict = field(default_factory=dict)
