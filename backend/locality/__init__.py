"""Locality Resolver - cached, rate-limited reverse geocoding.

Layers:
    - utils: LRU/TTL cache and upstream rate limiter
    - models: Pydantic models and the error taxonomy
    - services: Nominatim upstream and the geocode cache
    - api: HTTP routes (FastAPI)

Usage:
    ```python
    from locality.services import GeocodeCache, NominatimReverseGeocoder

    cache = GeocodeCache(NominatimReverseGeocoder())
    result = await cache.resolve(41.9178, 3.2014)
    ```

For HTTP API:
    ```python
    from locality.main import app
    ```
"""

__version__ = "0.1.0"
