"""
LinkManager module for Shortlink Platform.

Responsibilities:
    - Allocate short codes: validate a caller-supplied code, or generate a
      random one and retry on collision (bounded)
    - Resolve codes to their target URL and record the click
    - Get, list and delete links

Design notes:
    - Validation always happens before the store is touched.
    - Only generated codes are retried. A taken custom code is reported to the
      caller as a conflict.
    - The store's create is the final arbiter of uniqueness. A create that
      loses a race is a collision (generated) or a conflict (custom).
    - Click recording is done before the redirect target is returned
      (record-then-respond). A failure to record is logged and swallowed so
      the redirect still goes out.
    - Storage and the code strategy are injected; the clock too, for tests.

LLM Prompt Example:
    "Explain how bounded retry on random code collisions differs from
    deterministic hashing, and why the unique constraint in the store,
    not the pre-check, is what guarantees uniqueness."
"""

import logging
from typing import Callable, Iterable, List, Optional

from ..config import settings
from ..errors import (
    AllocationExhaustedError,
    CodeConflictError,
    InvalidCodeFormatError,
    InvalidUrlError,
    LinkNotFoundError,
    StoreUnavailableError,
)
from ..models import Link, utcnow
from ..storage.base import BaseStorage
from .strategies import BaseStrategy, RandomStrategy
from .validators import is_absolute_url, is_valid_short_code

log = logging.getLogger(__name__)

SORT_FIELDS = {
    "date": lambda link: link.created_at,
    "clicks": lambda link: link.clicks,
    "name": lambda link: link.short_code.lower(),
}
SORT_ORDERS = ("asc", "desc")


class LinkManager:
    """
    Coordinates creation, resolution and lifecycle rules for links.
    """

    def __init__(
        self,
        storage: BaseStorage,
        code_strategy: Optional[BaseStrategy] = None,
        code_length: Optional[int] = None,
        max_attempts: Optional[int] = None,
        clock: Callable = utcnow,
        reserved_codes: Iterable[str] = (),
    ):
        """
        Args:
            storage (BaseStorage): Backend storage instance.
            code_strategy (Optional[BaseStrategy]): Code generator; random by default.
            code_length (Optional[int]): Generated code length (settings.CODE_LENGTH).
            max_attempts (Optional[int]): Collision retry bound (settings.MAX_ATTEMPTS).
            clock (Callable): Returns the current aware datetime.
            reserved_codes (Iterable[str]): Codes that collide with fixed app routes
                (e.g. "healthz"); never issued, refused as custom codes.
        """
        self.storage = storage
        self.code_strategy = code_strategy or RandomStrategy()
        self.code_length = code_length if code_length is not None else settings.CODE_LENGTH
        self.max_attempts = max_attempts if max_attempts is not None else settings.MAX_ATTEMPTS
        self.clock = clock
        self.reserved_codes = frozenset(reserved_codes)

    # ---------------------------------------------------------------------
    # Code allocation
    # ---------------------------------------------------------------------
    def create_link(self, target_url: Optional[str], short_code: Optional[str] = None) -> Link:
        """
        Create a link for `target_url`, optionally under a caller-chosen code.

        Rules:
            - `target_url` must parse as an absolute URL (any scheme except
              script-bearing ones; host-based schemes need a host).
            - A supplied `short_code` must be 6-8 ASCII alphanumerics and free.
            - Without a code, a random one is generated and checked against
              the store, up to `max_attempts` times.

        Returns:
            Link: The persisted record (clicks=0, last_clicked=None).

        Raises:
            InvalidUrlError, InvalidCodeFormatError, CodeConflictError,
            AllocationExhaustedError, StoreUnavailableError
        """
        if not target_url:
            raise InvalidUrlError("targetUrl is required")
        if not is_absolute_url(target_url):
            raise InvalidUrlError("Invalid URL format")

        if short_code:
            return self._create_custom(target_url, short_code)
        return self._create_generated(target_url)

    def _create_custom(self, target_url: str, short_code: str) -> Link:
        if not is_valid_short_code(short_code):
            raise InvalidCodeFormatError("Short code must be 6-8 alphanumeric characters")
        if short_code in self.reserved_codes or self.storage.code_exists(short_code):
            raise CodeConflictError("Short code already exists")

        link = Link.new(short_code, target_url, now=self.clock())
        if not self.storage.create_link(link):
            # Lost a race with a concurrent create of the same code
            raise CodeConflictError("Short code already exists")
        log.info("Created link %s -> %s (custom code)", short_code, target_url)
        return link

    def _create_generated(self, target_url: str) -> Link:
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.code_strategy.generate(length=self.code_length)
            if candidate in self.reserved_codes or self.storage.code_exists(candidate):
                log.warning("Short code collision on %s (attempt %d/%d)", candidate, attempt, self.max_attempts)
                continue
            link = Link.new(candidate, target_url, now=self.clock())
            if self.storage.create_link(link):
                log.info("Created link %s -> %s", candidate, target_url)
                return link
            log.warning("Short code %s taken during create (attempt %d/%d)", candidate, attempt, self.max_attempts)

        log.error("Gave up allocating a short code after %d attempts", self.max_attempts)
        raise AllocationExhaustedError("Failed to generate unique short code")

    # ---------------------------------------------------------------------
    # Redirect resolution
    # ---------------------------------------------------------------------
    def resolve_link(self, code: str) -> str:
        """
        Return the target URL for `code` after recording the click.

        The click is recorded synchronously before returning. If recording
        fails, the failure is logged and the target URL is still returned.

        Raises:
            LinkNotFoundError: Unknown or deleted code.
            StoreUnavailableError: The lookup itself failed.
        """
        return self.resolve(code).target_url

    def resolve(self, code: str) -> Link:
        """
        Same as `resolve_link`, but return the whole link.

        The result is the post-click record from the store. If the click
        could not be recorded, it is the record as it was looked up.
        """
        link = self.storage.get_link(code)
        if link is None:
            raise LinkNotFoundError("Link not found")

        try:
            updated = self.storage.record_click(code, self.clock())
        except StoreUnavailableError:
            log.exception("Failed to record click for %s; redirecting anyway", code)
            return link
        if updated is None:
            log.warning("Link %s disappeared before its click was recorded", code)
            return link
        return updated

    def record_click(self, code: str) -> Link:
        """
        Record a click explicitly and return the updated link.

        Unlike `resolve_link`, store failures propagate to the caller.
        """
        updated = self.storage.record_click(code, self.clock())
        if updated is None:
            raise LinkNotFoundError("Link not found")
        return updated

    # ---------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------
    def get_link(self, code: str) -> Link:
        link = self.storage.get_link(code)
        if link is None:
            raise LinkNotFoundError("Link not found")
        return link

    def delete_link(self, code: str) -> None:
        """Hard-delete; afterwards the code resolves exactly like one never created."""
        if not self.storage.delete_link(code):
            raise LinkNotFoundError("Link not found")
        log.info("Deleted link %s", code)

    def list_links(self, search: Optional[str] = None, sort_by: str = "date", order: str = "desc") -> List[Link]:
        """
        List links, newest first by default.

        Args:
            search (Optional[str]): Case-insensitive substring of code or target URL.
            sort_by (str): "date", "clicks" or "name".
            order (str): "asc" or "desc".

        Raises:
            ValueError: Unknown sort field or order.
        """
        if sort_by not in SORT_FIELDS:
            raise ValueError(f"sort_by must be one of {sorted(SORT_FIELDS)}")
        if order not in SORT_ORDERS:
            raise ValueError(f"order must be one of {list(SORT_ORDERS)}")

        links = self.storage.list_links()
        if search:
            needle = search.lower()
            links = [l for l in links if needle in l.short_code.lower() or needle in l.target_url.lower()]

        if sort_by == "date" and order == "desc":
            return links
        return sorted(links, key=SORT_FIELDS[sort_by], reverse=(order == "desc"))
