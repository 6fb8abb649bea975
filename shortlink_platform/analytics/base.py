"""
Abstract Base Class for Analytics Backends.

Responsibilities:
    - Define required methods for any analytics implementation
    - Support easy substitution (e.g., store-derived, event pipeline, external metrics)
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ..models import Link

__all__ = ["BaseAnalytics"]


class BaseAnalytics(ABC):
    """Abstract base for pluggable analytics backends."""

    @abstractmethod
    def link_status(self, link: Link, now: Optional[datetime] = None):  # pragma: no cover
        """
        Classify how recently a link has been used.

        Args:
            link (Link): The link to classify.
            now (Optional[datetime]): Reference time; defaults to current UTC time.
        """
        raise NotImplementedError

    @abstractmethod
    def summary(self) -> dict:  # pragma: no cover
        """
        Provide aggregate analytics.

        Returns:
            dict: Aggregated analytics data.
        """
        raise NotImplementedError
