"""
Analytics module for Shortlink Platform.

Responsibilities:
    - Bucket each link by how recently it was clicked
    - Provide global totals (link count, click sum) and per-bucket counts

Every figure is computed from the store on each call. Nothing is cached in
the process, so totals are always as fresh as the store itself.

Buckets (whole days since `last_clicked`):
    - no clicks at all     -> "inactive"      ("No clicks")
    - <= 1 day             -> "very-active"   ("Hot")
    - <= 7 days            -> "active"        ("Active")
    - <= 30 days           -> "dormant"       ("Dormant")
    - anything older       -> "inactive-old"  ("Old")

LLM Prompt Example:
    "Explain how to keep dashboard totals consistent with the database by
    deriving them with COUNT/SUM queries instead of in-process counters."
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Dict, Optional

from ..models import Link, utcnow
from ..storage.base import BaseStorage
from .base import BaseAnalytics

STATUSES = ("inactive", "very-active", "active", "dormant", "inactive-old")


@dataclass(frozen=True)
class LinkStatus:
    """Activity bucket for one link, ready for display."""

    status: str
    label: str
    description: str
    days_since_last_click: Optional[int]

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["daysSinceLastClick"] = data.pop("days_since_last_click")
        return data


class Analytics(BaseAnalytics):
    def __init__(self, storage: BaseStorage):
        self.storage = storage

    def link_status(self, link: Link, now: Optional[datetime] = None) -> LinkStatus:
        """
        Classify a link by whole days since its last click.

        Args:
            link (Link): The link to classify.
            now (Optional[datetime]): Reference time; defaults to current UTC time.

        Returns:
            LinkStatus

        Notes:
            - A link with clicks but no `last_clicked` (e.g. imported data) has
              no day count and falls through to "inactive-old".
        """
        now = now or utcnow()
        days = None
        if link.last_clicked is not None:
            days = max(0, (now - link.last_clicked).days)

        if link.clicks == 0:
            return LinkStatus("inactive", "No clicks", "Never been clicked", days)
        if days is not None and days <= 1:
            return LinkStatus("very-active", "Hot", f"Clicked today ({link.clicks} total)", days)
        if days is not None and days <= 7:
            return LinkStatus("active", "Active", f"Clicked {days} days ago", days)
        if days is not None and days <= 30:
            return LinkStatus("dormant", "Dormant", f"Clicked {days} days ago", days)
        if days is None:
            return LinkStatus("inactive-old", "Old", "Last click time unknown", None)
        return LinkStatus("inactive-old", "Old", f"Last click was {days} days ago", days)

    def summary(self, now: Optional[datetime] = None) -> Dict:
        """
        Get totals and per-bucket counts across all links.

        Returns:
            Dict: e.g.
                {
                    "total_links": 3,
                    "total_clicks": 12,
                    "by_status": {"inactive": 1, "very-active": 2, "active": 0,
                                  "dormant": 0, "inactive-old": 0}
                }
        """
        now = now or utcnow()
        by_status = {status: 0 for status in STATUSES}
        for link in self.storage.list_links():
            by_status[self.link_status(link, now).status] += 1

        return {
            "total_links": self.storage.count_links(),
            "total_clicks": self.storage.sum_clicks(),
            "by_status": by_status,
        }
