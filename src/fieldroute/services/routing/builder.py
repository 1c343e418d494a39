"""Daily route construction from claim identifiers."""

from __future__ import annotations

import logging
import math
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from ...config import settings
from ...data.claims_repository import ClaimRepository, resolve_claim_address
from ...models.domain import ClaimRecord, Coordinates
from ..geospatial import distance, travel_minutes
from .geocoding_client import Geocoder, GeocodingClient
from .models import Route, RoutingConfig, Stop, normalize_route_date, today_iso

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def sum_leg_distances(stops: Sequence[Stop]) -> float:
    """Sum distances between consecutive stops.

    A leg with a missing coordinate on either end counts as 0 km, so partially
    geocoded routes understate their true length.
    """
    total = 0.0
    for current, following in zip(stops, stops[1:]):
        if current.coordinates is not None and following.coordinates is not None:
            total += distance(current.coordinates, following.coordinates)
    return total


def estimate_duration_minutes(total_distance_km: float, stop_count: int, config: RoutingConfig) -> int:
    driving = travel_minutes(total_distance_km, config.average_speed_kmh)
    return round_half_up(driving + stop_count * config.dwell_minutes)


def summarize(stops: Sequence[Stop], config: RoutingConfig | None = None) -> tuple[float, int]:
    """Return (total_distance_km, estimated_duration_min) for stops in their current order."""
    config = config or RoutingConfig()
    total_distance = sum_leg_distances(stops)
    return total_distance, estimate_duration_minutes(total_distance, len(stops), config)


def _safe_geocode(geocoder: Geocoder, address: str) -> Coordinates | None:
    if address == settings.unknown_address:
        return None
    try:
        return geocoder.geocode(address)
    except Exception as exc:
        logger.warning(f"Geocoding failed for address {address!r}: {exc}")
        return None


def _validate_claim_ids(claim_ids: Sequence[str]) -> list[str]:
    if isinstance(claim_ids, (str, bytes)) or not isinstance(claim_ids, (list, tuple)):
        raise TypeError(f"claim_ids must be a list of strings, got {type(claim_ids).__name__}")
    for claim_id in claim_ids:
        if not isinstance(claim_id, str):
            raise TypeError(f"claim id must be a string, got {type(claim_id).__name__}")
    return list(claim_ids)


def _geocode_addresses(geocoder: Geocoder, addresses: Sequence[str], workers: int) -> list[Coordinates | None]:
    if workers > 1 and len(addresses) > 1:
        with ThreadPoolExecutor(max_workers=min(workers, len(addresses))) as executor:
            # map keeps input order regardless of completion order
            return list(executor.map(lambda address: _safe_geocode(geocoder, address), addresses))
    return [_safe_geocode(geocoder, address) for address in addresses]


def _assemble_route(stops: list[Stop], requested: int, route_date: str | None, config: RoutingConfig) -> Route:
    total_distance, estimated_duration = summarize(stops, config)
    unplottable = sum(1 for stop in stops if stop.coordinates is None)
    logger.info(
        f"Built route with {len(stops)} stops from {requested} claims "
        f"({unplottable} without coordinates, {total_distance:.2f} km, {estimated_duration} min)"
    )

    return Route(
        id=f"route_{uuid.uuid4().hex}",
        date=normalize_route_date(route_date) if route_date else today_iso(),
        stops=stops,
        total_distance_km=total_distance,
        estimated_duration_min=estimated_duration,
        optimized=False,
    )


def build_route(
    claim_ids: Sequence[str],
    *,
    repository: ClaimRepository | None = None,
    geocoder: Geocoder | None = None,
    route_date: str | None = None,
    config: RoutingConfig | None = None,
    max_workers: int | None = None,
) -> Route:
    """Create an unoptimized route visiting the given claims in input order.

    Claims that cannot be found are left out. Addresses that fail to geocode
    produce stops without coordinates rather than failing the route.

    Raises:
        TypeError: ``claim_ids`` is not a list of strings
        ValueError: ``route_date`` is not an ISO date
    """
    ids = _validate_claim_ids(claim_ids)
    if route_date:
        route_date = normalize_route_date(route_date)
    repository = repository or ClaimRepository()
    config = config or RoutingConfig()
    workers = max_workers if max_workers is not None else settings.geocode_max_workers

    resolved: list[tuple[int, str, str]] = []
    for index, claim_id in enumerate(ids):
        claim = repository.get_claim(claim_id)
        if claim is None:
            logger.info(f"Skipping claim '{claim_id}': no record found")
            continue
        resolved.append((index, claim.claim_id, resolve_claim_address(claim)))

    if resolved and geocoder is None:
        geocoder = GeocodingClient()
    coordinates = _geocode_addresses(geocoder, [address for _, _, address in resolved], workers)

    stops = [
        Stop(
            id=f"stop_{index}",
            claim_id=claim_id,
            address=address,
            coordinates=coords,
            order=index,
        )
        for (index, claim_id, address), coords in zip(resolved, coordinates)
    ]
    return _assemble_route(stops, len(ids), route_date, config)


def build_route_from_claims(
    claims: Sequence[ClaimRecord],
    *,
    geocoder: Geocoder | None = None,
    route_date: str | None = None,
    config: RoutingConfig | None = None,
    max_workers: int | None = None,
    require_coordinates: bool = False,
) -> Route:
    """Create an unoptimized route from already loaded claims.

    With ``require_coordinates`` claims whose address cannot be geocoded are
    dropped and the remaining stops are numbered consecutively.
    """
    if route_date:
        route_date = normalize_route_date(route_date)
    config = config or RoutingConfig()
    workers = max_workers if max_workers is not None else settings.geocode_max_workers

    addresses = [resolve_claim_address(claim) for claim in claims]
    if addresses and geocoder is None:
        geocoder = GeocodingClient()
    coordinates = _geocode_addresses(geocoder, addresses, workers)

    located = list(zip(claims, addresses, coordinates))
    if require_coordinates:
        for claim, address, coords in located:
            if coords is None:
                logger.info(f"Dropping claim '{claim.claim_id}': could not geocode {address!r}")
        located = [entry for entry in located if entry[2] is not None]

    stops = [
        Stop(
            id=f"stop_{index}",
            claim_id=claim.claim_id,
            address=address,
            coordinates=coords,
            order=index,
        )
        for index, (claim, address, coords) in enumerate(located)
    ]
    return _assemble_route(stops, len(claims), route_date, config)
