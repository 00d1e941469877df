"""Utility modules: in-memory LRU cache and upstream rate limiter."""

from .cache import LRUCache
from .rate_limit import RateLimiter

__all__ = ["LRUCache", "RateLimiter"]
