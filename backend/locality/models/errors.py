"""Error taxonomy for locality resolution.

Negative results ("no locality at these coordinates") are not errors; they
are returned as ``NegativeMarker`` values.
"""

from typing import Optional

from .core import ErrorCode


class GeocodingError(Exception):
    """Base class for failures surfaced by ``GeocodeCache.resolve``."""

    code: ErrorCode = ErrorCode.API_ERROR
    user_message: str = "Something went wrong. Please try again."

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidCoordinates(GeocodingError, ValueError):
    """Coordinates out of range. Raised before any cache or network access."""

    code = ErrorCode.INVALID_COORDINATES
    user_message = "Invalid coordinates. Latitude must be in [-90, 90] and longitude in [-180, 180]."

    def __init__(self, latitude: float, longitude: float, message: Optional[str] = None) -> None:
        super().__init__(message or f"Invalid coordinates: ({latitude}, {longitude})")
        self.latitude = latitude
        self.longitude = longitude


class NetworkError(GeocodingError):
    """Upstream unreachable, timed out, or answered with a non-2xx status."""

    code = ErrorCode.NETWORK_ERROR
    user_message = "Location lookup is unavailable right now."

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(GeocodingError):
    """Upstream answered with a body that could not be understood."""

    code = ErrorCode.PARSE_ERROR
    user_message = "Location lookup returned an unexpected response."
