"""Nominatim service module.

Provides the reverse-geocoding upstream used by the geocode cache.
"""

from .service import (
    NominatimReverseGeocoder,
    ReverseGeocoderService,
    extract_locality,
)

__all__ = [
    "NominatimReverseGeocoder",
    "ReverseGeocoderService",
    "extract_locality",
]
