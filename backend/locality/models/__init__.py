"""Data models and error types for the locality resolver."""

from .core import (
    AppError,
    CacheKey,
    CacheStats,
    ErrorCode,
    LocalityResponse,
    LocalityResult,
    NegativeMarker,
    PendingResponse,
)
from .errors import GeocodingError, InvalidCoordinates, NetworkError, ParseError

__all__ = [
    "AppError",
    "CacheKey",
    "CacheStats",
    "ErrorCode",
    "LocalityResponse",
    "LocalityResult",
    "NegativeMarker",
    "PendingResponse",
    "GeocodingError",
    "InvalidCoordinates",
    "NetworkError",
    "ParseError",
]
