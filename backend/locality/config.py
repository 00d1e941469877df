"""Service settings loaded from environment variables (and ``.env``)."""

import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _csv(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Geocode cache
    cache_capacity: int = field(
        default_factory=lambda: int(os.getenv("GEOCODE_CACHE_CAPACITY", "100"))
    )
    cache_ttl_seconds: float = field(
        default_factory=lambda: float(os.getenv("GEOCODE_CACHE_TTL_SECONDS", "86400"))  # 24h
    )
    coordinate_precision: int = field(
        default_factory=lambda: int(os.getenv("GEOCODE_COORDINATE_PRECISION", "4"))  # ~11m
    )

    # Nominatim usage policy: max 1 request/second
    min_interval_seconds: float = field(
        default_factory=lambda: float(os.getenv("GEOCODE_MIN_INTERVAL_SECONDS", "1.0"))
    )

    # Nominatim
    nominatim_url: str = field(
        default_factory=lambda: os.getenv(
            "NOMINATIM_URL", "https://nominatim.openstreetmap.org/reverse"
        )
    )
    nominatim_user_agent: str = field(
        default_factory=lambda: os.getenv("NOMINATIM_USER_AGENT", "JournalApp/1.0")
    )
    nominatim_timeout: float = field(
        default_factory=lambda: float(os.getenv("NOMINATIM_TIMEOUT", "10.0"))
    )

    # API
    cors_origins: tuple[str, ...] = field(
        default_factory=lambda: _csv(
            os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")
        )
    )

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_capacity < 1:
            raise ValueError("GEOCODE_CACHE_CAPACITY must be at least 1")
        if self.cache_ttl_seconds <= 0:
            raise ValueError("GEOCODE_CACHE_TTL_SECONDS must be positive")
        if self.min_interval_seconds < 0:
            raise ValueError("GEOCODE_MIN_INTERVAL_SECONDS must not be negative")
        if not 0 <= self.coordinate_precision <= 10:
            raise ValueError(
                f"GEOCODE_COORDINATE_PRECISION must be between 0 and 10, "
                f"got {self.coordinate_precision}"
            )
        if self.nominatim_timeout <= 0:
            raise ValueError("NOMINATIM_TIMEOUT must be positive")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
