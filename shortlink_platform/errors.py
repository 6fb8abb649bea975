"""
Error taxonomy for Shortlink Platform.

Every failure the core can report is a `LinkError` subclass. Each class
carries the HTTP status the API layer answers with, so routes only need one
exception handler instead of a ladder of `except` blocks.

Validation errors also subclass `ValueError` and the not-found error
subclasses `LookupError`, so callers that only care about the broad
category can keep catching the builtin types.
"""


class LinkError(Exception):
    """Base class for all link-domain failures."""

    status_code: int = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class InvalidUrlError(LinkError, ValueError):
    """The target URL is missing or is not an absolute http/https URL."""

    status_code = 400


class InvalidCodeFormatError(LinkError, ValueError):
    """A caller-supplied short code is not 6-8 ASCII letters or digits."""

    status_code = 400


class CodeConflictError(LinkError):
    """A caller-supplied short code is already taken."""

    status_code = 409


class AllocationExhaustedError(LinkError):
    """Every generated candidate collided with an existing code."""

    status_code = 500


class LinkNotFoundError(LinkError, LookupError):
    """No live link exists for the code (never created or deleted)."""

    status_code = 404


class StoreUnavailableError(LinkError):
    """The storage backend failed; wraps the driver exception as __cause__."""

    status_code = 503


__all__ = [
    "LinkError",
    "InvalidUrlError",
    "InvalidCodeFormatError",
    "CodeConflictError",
    "AllocationExhaustedError",
    "LinkNotFoundError",
    "StoreUnavailableError",
]
