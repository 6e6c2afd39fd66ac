"""POSTCREDIT — LinkedIn URL Identity.

Canonicalizes content post URLs into stable comparison keys. Two URLs map to
the same key iff they address the same content item, modulo tracking
parameters, trailing slashes, protocol and host capitalization.
"""

import re
from typing import Any, Optional
from urllib.parse import urlsplit

CANONICAL_HOST = "www.linkedin.com"
ACCEPTED_HOSTS = {"www.linkedin.com", "linkedin.com"}

# Post permalink, feed-update permalink, article permalink, profile activity
ACCEPTED_PATH_PATTERNS = (
    re.compile(r"^/posts/", re.IGNORECASE),
    re.compile(r"^/feed/update/", re.IGNORECASE),
    re.compile(r"^/pulse/", re.IGNORECASE),
    re.compile(r"^/in/[^/]+/recent-activity/all/?$", re.IGNORECASE),
)

_TRAILING_SLASHES = re.compile(r"/+$")


def _coerce_url_input(raw: str) -> str:
    """Upgrade http:// and bare linkedin.com forms to https://."""
    trimmed = raw.strip()
    lowered = trimmed.lower()

    if lowered.startswith("http://"):
        return "https://" + trimmed[len("http://") :]
    if lowered.startswith("https://"):
        return trimmed
    if lowered.startswith("www.linkedin.com/") or lowered.startswith("linkedin.com/"):
        return "https://" + trimmed
    return trimmed


def normalize_linkedin_url(raw_url: Any) -> Optional[str]:
    """Return the canonical key for a LinkedIn content URL, or None.

    Never raises: anything that is not a recognisable content URL
    (wrong host, unsupported path, garbage input) yields None.
    """
    if not isinstance(raw_url, str) or not raw_url.strip():
        return None

    try:
        parsed = urlsplit(_coerce_url_input(raw_url))
        hostname = (parsed.hostname or "").lower()
    except ValueError:
        return None

    if parsed.scheme.lower() != "https":
        return None
    if hostname not in ACCEPTED_HOSTS:
        return None

    path = parsed.path.strip()
    if not path.startswith("/"):
        path = "/" + path
    path = _TRAILING_SLASHES.sub("", path) or "/"

    if not any(pattern.search(path) for pattern in ACCEPTED_PATH_PATTERNS):
        return None

    return f"https://{CANONICAL_HOST}{path}"
