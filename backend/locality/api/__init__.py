"""HTTP API for the locality resolver."""

from .routes import get_geocode_cache, peek_geocode_cache, router, set_geocode_cache

__all__ = ["router", "get_geocode_cache", "peek_geocode_cache", "set_geocode_cache"]
