"""Locality resolver services.

Service layer components:
- Nominatim: OpenStreetMap reverse geocoding upstream
- Geocode cache: in-memory LRU/TTL cache with rate limiting and request coalescing
"""

from .geocode_cache import GeocodeCache, Resolution
from .nominatim import NominatimReverseGeocoder, ReverseGeocoderService

__all__ = [
    # Geocode cache
    "GeocodeCache",
    "Resolution",
    # Upstream
    "NominatimReverseGeocoder",
    "ReverseGeocoderService",
]
