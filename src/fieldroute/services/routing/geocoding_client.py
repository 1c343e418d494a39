"""HTTP client for Nominatim-compatible geocoding services."""

from __future__ import annotations

import logging
import threading
import time
from typing import Protocol

import httpx

from ...config import settings
from ...models.domain import Coordinates

logger = logging.getLogger(__name__)

_MISSING = object()


class Geocoder(Protocol):
    def geocode(self, address: str) -> Coordinates | None:
        ...


def _normalise(address: str) -> str:
    return " ".join(address.strip().lower().split())


class GeocodingClient:
    """Free-text address search with retries and an in-process result cache.

    Misses are cached too, so an unresolvable address is looked up once per client.
    """

    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.geocoder_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("Geocoder base URL is not configured.")
        self.user_agent = user_agent or settings.geocoder_user_agent
        self.timeout = timeout if timeout is not None else settings.geocoder_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.geocoder_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.geocoder_backoff_seconds
        self.transport = transport
        self._cache: dict[str, Coordinates | None] = {}
        self._lock = threading.Lock()

    def _get_client(self) -> httpx.Client:
        # one client per call; geocoding runs from worker threads
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            headers={"User-Agent": self.user_agent},
            transport=self.transport,
        )

    def _search(self, address: str) -> list:
        params = {"q": address, "format": "json", "limit": 1}
        url = f"{self.base_url}/search"

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    data = response.json()
                    if not isinstance(data, list):
                        raise ValueError("Geocoder response is not a result list.")
                    return data
                except httpx.HTTPStatusError as e:
                    # client errors other than rate limiting will not improve on retry
                    if e.response.status_code < 500 and e.response.status_code != 429:
                        raise
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Geocoding request timed out after {self.max_retries} retries: {e}")
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Geocoding timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except (httpx.ConnectError, httpx.NetworkError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"Failed to connect to geocoding service at {self.base_url}: {e}"
                        ) from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Geocoding network error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                    time.sleep(wait_time)
        finally:
            client.close()

    def geocode(self, address: str) -> Coordinates | None:
        """Resolve an address to coordinates, or None when nothing matches."""
        if not address or not address.strip():
            return None

        key = _normalise(address)
        with self._lock:
            cached = self._cache.get(key, _MISSING)
        if cached is not _MISSING:
            logger.debug("Geocode cache hit for %r", address)
            return cached

        results = self._search(address.strip())
        coordinates = None
        if results:
            first = results[0]
            try:
                coordinates = Coordinates(latitude=float(first["lat"]), longitude=float(first["lon"]))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Unusable geocoding result for {address!r}: {e}")

        with self._lock:
            self._cache[key] = coordinates
        return coordinates

    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)


def check_health(base_url: str | None = None) -> bool:
    """Check that the geocoding service answers a minimal search."""
    base = (base_url or settings.geocoder_base_url or "").rstrip("/")
    if not base:
        return False
    try:
        response = httpx.get(
            f"{base}/search",
            params={"q": "London", "format": "json", "limit": 1},
            headers={"User-Agent": settings.geocoder_user_agent},
            timeout=5.0,
        )
        response.raise_for_status()
        return isinstance(response.json(), list)
    except httpx.HTTPError:
        return False
    except ValueError:
        return False
