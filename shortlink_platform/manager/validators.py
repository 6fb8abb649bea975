"""
Input validators shared by the manager and the API layer.

These are the server-side rules only. Stricter browser-side checks (TLD
allow-lists, multi-level domain suffixes) are deliberately not mirrored here;
they would reject URLs the allocator accepts.
"""

import re
from typing import Any
from urllib.parse import urlsplit

SHORT_CODE_PATTERN = re.compile(r"[A-Za-z0-9]{6,8}", re.ASCII)

ALLOWED_SCHEMES = frozenset({"http", "https"})


def is_valid_url(value: Any) -> bool:
    """
    True iff `value` parses as an absolute http/https URL with a host.

    >>> is_valid_url("https://example.com/a?b=1")
    True
    >>> is_valid_url("ftp://example.com")
    False
    """
    if not isinstance(value, str) or not value:
        return False
    try:
        parts = urlsplit(value)
        # .port raises on out-of-range or non-numeric ports
        parts.port
    except ValueError:
        return False
    return parts.scheme.lower() in ALLOWED_SCHEMES and bool(parts.hostname)


def is_valid_short_code(value: Any) -> bool:
    """True iff `value` is 6 to 8 ASCII letters or digits."""
    return isinstance(value, str) and SHORT_CODE_PATTERN.fullmatch(value) is not None


# Schemes that need a host to be meaningful (WHATWG "special" schemes minus file)
HOST_SCHEMES = frozenset({"http", "https", "ftp", "ws", "wss"})

# Script-bearing schemes are refused even though they parse
BLOCKED_SCHEMES = frozenset({"javascript", "vbscript", "data"})


def is_absolute_url(value: Any) -> bool:
    """
    True iff `value` parses as an absolute URL: any scheme plus a location.

    Used by the allocator, which accepts any parseable absolute URL rather
    than only http/https. Host-based schemes (http, https, ftp, ws, wss)
    need a host; other schemes need a non-empty location or path
    (`mailto:a@example.com`, `file:///tmp/x`). Schemes in BLOCKED_SCHEMES
    are refused.

    >>> is_absolute_url("ftp://example.com/file")
    True
    >>> is_absolute_url("mailto:a@example.com")
    True
    >>> is_absolute_url("example.com")
    False
    """
    if not isinstance(value, str) or not value or value != value.strip():
        return False
    try:
        parts = urlsplit(value)
        parts.port
    except ValueError:
        return False

    scheme = parts.scheme.lower()
    if not scheme or scheme in BLOCKED_SCHEMES:
        return False
    if scheme in HOST_SCHEMES:
        return bool(parts.hostname)
    return bool(parts.netloc or parts.path)
