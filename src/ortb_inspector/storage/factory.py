# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Result cache factory."""

from typing import Optional

from ..config.settings import Settings, get_settings
from .base import ResultCache
from .memory_backend import InMemoryResultCache


def get_result_cache(settings: Optional[Settings] = None) -> Optional[ResultCache]:
    """Create the result cache described by the settings.

    Args:
        settings: Settings to read (defaults to the process settings)

    Returns:
        ResultCache instance, or None when result caching is disabled
    """
    settings = settings or get_settings()

    if not settings.result_cache_enabled:
        return None

    return InMemoryResultCache(max_entries=settings.result_cache_max_entries)
