"""Geocode cache service module."""

from .service import GeocodeCache, Resolution, validate_coordinates

__all__ = ["GeocodeCache", "Resolution", "validate_coordinates"]
