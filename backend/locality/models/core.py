"""Core data models for the locality resolver.

This module contains the Pydantic models used throughout the service for
representing coordinates, cache keys, resolved localities and the error
payload returned by the HTTP layer.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class CacheKey:
    """Coordinate pair quantized to a fixed number of decimal places.

    Near-identical coordinates collapse onto the same key. At the default
    precision of 4 places a key covers roughly 11m.
    """

    latitude: float
    longitude: float
    precision: int = 4

    @classmethod
    def from_coordinates(cls, latitude: float, longitude: float, precision: int = 4) -> "CacheKey":
        # "+ 0.0" folds -0.0 into 0.0 so both render the same way
        return cls(
            latitude=round(latitude, precision) + 0.0,
            longitude=round(longitude, precision) + 0.0,
            precision=precision,
        )

    def __str__(self) -> str:
        return f"{self.latitude:.{self.precision}f},{self.longitude:.{self.precision}f}"


class LocalityResult(BaseModel):
    """A resolved, human-readable locality. Immutable once constructed."""

    model_config = ConfigDict(frozen=True)

    locality: str = Field(..., description="Most specific place name, e.g. 'Tamariu'")
    display_name: str = Field(..., description="Full display name from the upstream service")
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    @property
    def found(self) -> bool:
        return True


class NegativeMarker(BaseModel):
    """Records that the upstream service had no locality for a key.

    Cached like any result so repeated misses within the freshness window
    don't reach the network. Not an error.
    """

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    reason: str = "No locality found"

    @property
    def found(self) -> bool:
        return False


class CacheStats(BaseModel):
    """Snapshot of the geocode cache counters."""

    size: int = Field(..., ge=0)
    capacity: int = Field(..., ge=1)
    ttl_seconds: float
    hits: int = Field(0, ge=0)
    misses: int = Field(0, ge=0)
    in_flight: int = Field(0, ge=0)


class ErrorCode(str, Enum):
    """Error codes reported to API consumers."""

    INVALID_COORDINATES = "INVALID_COORDINATES"
    NETWORK_ERROR = "NETWORK_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    API_ERROR = "API_ERROR"


class AppError(BaseModel):
    """Error payload returned in a ``success: false`` envelope."""

    code: ErrorCode
    message: str
    user_message: str
    status_code: Optional[int] = Field(
        None, description="Upstream HTTP status, when the upstream answered"
    )


class LocalityResponse(BaseModel):
    """Response model for locality lookups."""

    success: bool
    found: bool = False
    key: Optional[str] = None
    result: Optional[LocalityResult] = None
    negative: Optional[NegativeMarker] = None
    error: Optional[AppError] = None


class PendingResponse(BaseModel):
    """Keys with an upstream fetch currently in flight."""

    pending: list[str] = Field(default_factory=list)
