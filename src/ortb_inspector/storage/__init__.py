"""Result caches for the OpenRTB inspector.

Analysis results are memoized in process memory, keyed by the exact input
text and the analysis options.
"""

from .base import ResultCache
from .factory import get_result_cache
from .memory_backend import InMemoryResultCache

__all__ = ["ResultCache", "InMemoryResultCache", "get_result_cache"]
