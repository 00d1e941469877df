"""API routes for the locality resolver.

Thin HTTP adapter over ``GeocodeCache``:
- /locality: resolve coordinates (may hit Nominatim, rate limited)
- /locality/cached: cache-only lookup, never touches the network
- /locality/pending: keys currently being fetched (loading state for the UI)
- /cache: stats and clearing
"""

import logging

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from locality.config import get_settings
from locality.models import (
    AppError,
    CacheStats,
    GeocodingError,
    InvalidCoordinates,
    LocalityResponse,
    LocalityResult,
    NetworkError,
    PendingResponse,
)
from locality.services import GeocodeCache, NominatimReverseGeocoder, Resolution
from locality.utils.rate_limit import RateLimiter

logger = logging.getLogger(__name__)

router = APIRouter()


# Service instances
_geocode_cache: GeocodeCache | None = None


def get_geocode_cache() -> GeocodeCache:
    global _geocode_cache
    if _geocode_cache is None:
        settings = get_settings()
        _geocode_cache = GeocodeCache(
            geocoder=NominatimReverseGeocoder(
                url=settings.nominatim_url,
                user_agent=settings.nominatim_user_agent,
                timeout=settings.nominatim_timeout,
            ),
            rate_limiter=RateLimiter(settings.min_interval_seconds),
            capacity=settings.cache_capacity,
            ttl_seconds=settings.cache_ttl_seconds,
            coordinate_precision=settings.coordinate_precision,
        )
    return _geocode_cache


def peek_geocode_cache() -> GeocodeCache | None:
    """The shared cache if one was created, without creating it."""
    return _geocode_cache


def set_geocode_cache(cache: GeocodeCache | None) -> None:
    """Replace the shared cache instance (tests, shutdown)."""
    global _geocode_cache
    _geocode_cache = cache


def _to_response(value: Resolution, key: str) -> LocalityResponse:
    if isinstance(value, LocalityResult):
        return LocalityResponse(success=True, found=True, key=key, result=value)
    return LocalityResponse(success=True, found=False, key=key, negative=value)


def _error_response(exc: GeocodingError) -> JSONResponse:
    if isinstance(exc, InvalidCoordinates):
        status = 422
    else:
        status = 502
    error = AppError(
        code=exc.code,
        message=exc.message,
        user_message=exc.user_message,
        status_code=exc.status_code if isinstance(exc, NetworkError) else None,
    )
    body = LocalityResponse(success=False, error=error)
    return JSONResponse(status_code=status, content=body.model_dump(mode="json"))


@router.get("/locality", response_model=LocalityResponse)
async def resolve_locality(
    lat: float = Query(..., description="Latitude in degrees"),
    lon: float = Query(..., description="Longitude in degrees"),
):
    """Resolve coordinates to a locality name.

    Served from cache when fresh; otherwise fetched from Nominatim, waiting
    for a rate-limit permit first. Upstream failures are returned as 502 and
    are not cached.
    """
    cache = get_geocode_cache()
    try:
        key = cache.key_for(lat, lon)
        value = await cache.resolve(lat, lon)
    except GeocodingError as e:
        if not isinstance(e, InvalidCoordinates):
            logger.warning(f"[GEOCODE] Lookup failed for ({lat}, {lon}): {e.message}")
        return _error_response(e)
    return _to_response(value, str(key))


@router.get("/locality/cached", response_model=LocalityResponse)
async def cached_locality(
    lat: float = Query(..., description="Latitude in degrees"),
    lon: float = Query(..., description="Longitude in degrees"),
):
    """Return the cached locality if fresh. Never calls the upstream."""
    cache = get_geocode_cache()
    try:
        key = cache.key_for(lat, lon)
        value = cache.get_cached(lat, lon)
    except InvalidCoordinates as e:
        return _error_response(e)
    if value is None:
        return LocalityResponse(success=True, found=False, key=str(key))
    return _to_response(value, str(key))


@router.get("/locality/pending", response_model=PendingResponse)
async def pending_localities() -> PendingResponse:
    """Keys with an upstream fetch in flight."""
    cache = get_geocode_cache()
    return PendingResponse(pending=[str(key) for key in cache.pending_keys])


@router.get("/cache/stats", response_model=CacheStats)
async def cache_stats() -> CacheStats:
    return get_geocode_cache().stats()


@router.delete("/cache")
async def clear_cache() -> dict:
    cache = get_geocode_cache()
    cleared = cache.size
    cache.clear()
    return {"success": True, "cleared": cleared}

