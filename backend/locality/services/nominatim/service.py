"""Reverse geocoding using the OpenStreetMap Nominatim API.

Converts a coordinate pair to a locality name (neighbourhood, village, town,
city, ...). Free, no API key required, but limited to 1 request/second; the
caller is responsible for spacing requests (see ``RateLimiter``).

Outcomes:
- a ``LocalityResult`` when Nominatim knows the place
- ``None`` when Nominatim answers "Unable to geocode" (no locality)
- ``NetworkError`` on transport failure, timeout or non-2xx status
- ``ParseError`` on a body that is not the expected JSON object
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from locality.models import LocalityResult, NetworkError, ParseError

logger = logging.getLogger(__name__)

# Most specific first: neighbourhood-level, then settlements, then administrative
LOCALITY_FIELDS = (
    "neighbourhood",
    "quarter",
    "suburb",
    "hamlet",
    "village",
    "town",
    "city",
    "municipality",
    "county",
    "state",
    "country",
)

UNKNOWN_LOCALITY = "Unknown location"


def extract_locality(address: dict[str, Any]) -> str:
    """Pick the most specific locality name from a Nominatim address block."""
    for name in LOCALITY_FIELDS:
        value = address.get(name)
        if isinstance(value, str) and value.strip():
            return value
    return UNKNOWN_LOCALITY


def _coordinate(data: dict[str, Any], field: str, requested: float, limit: float) -> float:
    """Upstream ``lat``/``lon`` of the matched place (sent as strings), else the requested value."""
    value = data.get(field)
    if value is None:
        return requested
    if isinstance(value, bool):
        raise ParseError(f"'{field}' must be numeric, got bool")
    try:
        parsed = float(value)
    except (TypeError, ValueError) as e:
        raise ParseError(f"'{field}' must be numeric, got {value!r}") from e
    if not math.isfinite(parsed) or not -limit <= parsed <= limit:
        raise ParseError(f"'{field}' out of range: {value!r}")
    return parsed


class ReverseGeocoderService(ABC):
    """Abstract base class for reverse geocoding upstreams."""

    @abstractmethod
    async def fetch_locality(self, latitude: float, longitude: float) -> Optional[LocalityResult]:
        """Resolve coordinates to a locality, or None when there is none.

        Raises:
            NetworkError: Upstream unreachable or non-success status.
            ParseError: Malformed response body.
        """
        pass

    async def close(self) -> None:
        pass


class NominatimReverseGeocoder(ReverseGeocoderService):
    """Nominatim ``/reverse`` client.

    Uses a shared httpx client with connection pooling. Pass ``client`` to
    supply your own (tests use ``httpx.MockTransport``); a supplied client is
    not closed by ``close()``.
    """

    NOMINATIM_URL = "https://nominatim.openstreetmap.org/reverse"
    USER_AGENT = "JournalApp/1.0"

    def __init__(
        self,
        url: str | None = None,
        user_agent: str | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url or self.NOMINATIM_URL
        self._timeout = timeout
        # Required by Nominatim usage policy; sent per request so a supplied
        # client carries them too
        self._headers = {
            "User-Agent": user_agent or self.USER_AGENT,
            "Accept": "application/json",
        }
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=4, max_keepalive_connections=2),
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def fetch_locality(self, latitude: float, longitude: float) -> Optional[LocalityResult]:
        params = {
            "lat": latitude,
            "lon": longitude,
            "format": "json",
            "addressdetails": 1,
        }
        client = self._get_client()
        try:
            response = await client.get(self._url, params=params, headers=self._headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.info(f"[NOMINATIM] HTTP {status} for ({latitude}, {longitude})")
            raise NetworkError(f"HTTP error: {status}", status_code=status) from e
        except httpx.HTTPError as e:
            logger.info(f"[NOMINATIM] Request failed for ({latitude}, {longitude}): {type(e).__name__}")
            raise NetworkError(f"Request failed: {type(e).__name__}: {e}") from e

        return self._parse_response(response, latitude, longitude)

    def _parse_response(
        self, response: httpx.Response, latitude: float, longitude: float
    ) -> Optional[LocalityResult]:
        """Turn a 2xx Nominatim body into a result, None, or ParseError."""
        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(f"Response is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ParseError(f"Expected a JSON object, got {type(data).__name__}")

        # Nominatim reports "no match" as 200 {"error": "Unable to geocode"}
        if "error" in data:
            logger.info(f"[NOMINATIM] No locality at ({latitude}, {longitude}): {data['error']}")
            return None

        address = data.get("address")
        display_name = data.get("display_name")
        if address is None and display_name is None:
            raise ParseError("Response has neither 'address' nor 'display_name'")
        if address is not None and not isinstance(address, dict):
            raise ParseError(f"'address' must be an object, got {type(address).__name__}")
        if display_name is not None and not isinstance(display_name, str):
            raise ParseError(f"'display_name' must be a string, got {type(display_name).__name__}")

        locality = extract_locality(address or {})
        if locality == UNKNOWN_LOCALITY and display_name:
            locality = display_name.split(",")[0].strip() or UNKNOWN_LOCALITY

        return LocalityResult(
            locality=locality,
            display_name=display_name or locality,
            latitude=_coordinate(data, "lat", latitude, 90),
            longitude=_coordinate(data, "lon", longitude, 180),
        )

    @property
    def url(self) -> str:
        return self._url
