"""
Base storage interface for Shortlink Platform.

Purpose:
    Define a small, stable contract that multiple storage backends
    (in-memory, PostgreSQL) can implement without requiring changes to
    the manager or the API.

Contract guarantees every backend must provide:
    - `create_link` is an atomic create-if-absent keyed by short code.
    - `record_click` increments the counter atomically inside the store;
      callers never read-modify-write the count.
    - Backend driver failures surface as `StoreUnavailableError`.

Testing & Coverage:
    These are abstract methods and are not executed directly in tests.
    We annotate them with `# pragma: no cover` so coverage tools don't
    penalize the project for un-runnable abstract declarations.

LLM Prompt Example:
    "Show how a narrow, explicit storage interface enables dependency
    injection and easy backend swapping without touching service code."
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from ..models import Link


class BaseStorage(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod  # pragma: no cover
    def create_link(self, link: Link) -> bool:
        """
        Persist a new link.

        Returns:
            bool: True if inserted, False if the short code is already taken.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get_link(self, short_code: str) -> Optional[Link]:
        """Return the link for a short code, or None."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def code_exists(self, short_code: str) -> bool:
        """True if a live link uses this short code."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def record_click(self, short_code: str, clicked_at: datetime) -> Optional[Link]:
        """
        Atomically add one click and set `last_clicked`.

        Returns:
            Optional[Link]: The updated link, or None if the code does not exist.

        LLM Prompt Example:
            "Explain how to make increments atomic with SQL UPDATE ... SET n = n + 1."
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def delete_link(self, short_code: str) -> bool:
        """Hard-delete a link. Returns True if a record was removed."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def list_links(self) -> List[Link]:
        """All links, newest-created first."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def count_links(self) -> int:
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def sum_clicks(self) -> int:
        """Total clicks across all links (0 when empty)."""
        raise NotImplementedError
