"""
Insights Cache

Cache-aside layer with a Redis backend, an in-process fallback store,
hit/miss metrics and pattern-based invalidation.
"""

__version__ = "1.0.0"
