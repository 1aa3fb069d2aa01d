# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Base result cache interface."""

from abc import ABC, abstractmethod
from typing import Hashable, Optional

from ..models.analysis import AnalysisResult


class ResultCache(ABC):
    """Abstract base class for analysis result caches.

    Backends store the AnalysisResult object itself: a hit must return the
    very object that was stored, without copying or re-serializing it.
    """

    @abstractmethod
    def get(self, key: Hashable) -> Optional[AnalysisResult]:
        """Retrieve a cached result by key."""
        pass

    @abstractmethod
    def set(self, key: Hashable, result: AnalysisResult) -> None:
        """Store a result."""
        pass

    @abstractmethod
    def delete(self, key: Hashable) -> bool:
        """Delete a key. Returns True if key existed."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Drop every cached result."""
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None
