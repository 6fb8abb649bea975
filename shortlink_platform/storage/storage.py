"""
Storage module for Shortlink Platform (in-memory implementation).

Responsibilities:
    - Save links keyed by short code
    - Track click counts and the last-click time
    - Provide lookup, listing, deletion and aggregate queries

Design:
    - In-memory reference implementation of the BaseStorage contract.
    - A single lock guards every read and write, which makes create-if-absent
      and click increments atomic under concurrent requests.
    - Records are copied on the way in and out so callers can never mutate
      stored state behind the lock.
    - For production, use the PostgreSQL backend (see `db_storage.py`).

LLM Prompt Example:
    "Explain how this in-memory storage can be swapped for a database-backed layer
     without changing the manager or API code, by adhering to a narrow,
     explicit BaseStorage interface."
"""

import threading
from datetime import datetime
from typing import Dict, List, Optional

from ..models import Link
from .base import BaseStorage


class Storage(BaseStorage):
    def __init__(self):
        """
        Initialize empty storage.

        Internal schema:
            self.links = { short_code: Link }
        """
        self.links: Dict[str, Link] = {}
        self._lock = threading.Lock()

    def create_link(self, link: Link) -> bool:
        """
        Insert a link unless its short code is already present.

        Returns:
            bool: True on insert, False on a duplicate short code.
        """
        with self._lock:
            if link.short_code in self.links:
                return False
            self.links[link.short_code] = link.copy()
            return True

    def get_link(self, short_code: str) -> Optional[Link]:
        with self._lock:
            link = self.links.get(short_code)
            return link.copy() if link else None

    def code_exists(self, short_code: str) -> bool:
        with self._lock:
            return short_code in self.links

    def record_click(self, short_code: str, clicked_at: datetime) -> Optional[Link]:
        """
        Increment click count and stamp `last_clicked` / `updated_at`.

        Returns:
            Optional[Link]: Updated copy, or None if the code is unknown.
        """
        with self._lock:
            link = self.links.get(short_code)
            if link is None:
                return None
            link.clicks += 1
            link.last_clicked = clicked_at
            link.updated_at = clicked_at
            return link.copy()

    def delete_link(self, short_code: str) -> bool:
        with self._lock:
            return self.links.pop(short_code, None) is not None

    def list_links(self) -> List[Link]:
        """
        Return all links, newest first.

        Insertion order breaks ties on equal `created_at` so the most recent
        insert still comes first.
        """
        with self._lock:
            ordered = list(self.links.values())
        ordered.reverse()
        ordered.sort(key=lambda l: l.created_at, reverse=True)
        return [link.copy() for link in ordered]

    def count_links(self) -> int:
        with self._lock:
            return len(self.links)

    def sum_clicks(self) -> int:
        with self._lock:
            return sum(link.clicks for link in self.links.values())
