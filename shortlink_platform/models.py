"""
Link record for Shortlink Platform.

The `Link` dataclass is the single entity shared by the manager, the storage
backends and the API layer. Storage backends build it from rows; the API
serializes it with `to_dict()` (camelCase keys, ISO-8601 timestamps).
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class Link:
    """A short code mapped to a target URL plus its click counters."""

    short_code: str
    target_url: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    clicks: int = 0
    last_clicked: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @classmethod
    def new(cls, short_code: str, target_url: str, now: Optional[datetime] = None) -> "Link":
        """Fresh record: zero clicks, never clicked, created and updated at `now`."""
        ts = now or utcnow()
        return cls(short_code=short_code, target_url=target_url, created_at=ts, updated_at=ts)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Link":
        """Build a Link from a dict row (e.g. psycopg `dict_row`)."""
        return cls(
            id=str(row["id"]),
            short_code=row["short_code"],
            target_url=row["target_url"],
            clicks=int(row.get("clicks") or 0),
            last_clicked=row.get("last_clicked"),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def copy(self) -> "Link":
        """Shallow copy so callers never hold a reference to stored state."""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "shortCode": self.short_code,
            "targetUrl": self.target_url,
            "clicks": self.clicks,
            "lastClicked": _iso(self.last_clicked),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
