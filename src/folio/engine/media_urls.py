"""Translate stored media references into externally servable URLs.

Pure read-path helper: given whatever is stored on a project (a bare
storage key, an absolute bucket URL, or an already-proxied path) it returns
the URL the site should render.
"""

from __future__ import annotations

import re
from urllib.parse import parse_qs, quote, unquote, urlparse

DEFAULT_PROXY_PATH = "/api/media"

_ABSOLUTE_URL = re.compile(r"^(https?:)?//", re.IGNORECASE)
_BUCKET_URL = re.compile(
    r"^https://[^/]*r2\.(?:dev|cloudflarestorage\.com)/([^?]+)",
    re.IGNORECASE,
)


def proxy_url_for_key(key: str, proxy_path: str = DEFAULT_PROXY_PATH) -> str:
    """Proxy URL serving the object stored under ``key``."""
    return f"{proxy_path}?key={quote(key, safe='')}"


def key_from_proxy_url(value: str) -> str | None:
    """Storage key carried by a proxy URL (``/api/...?key=...``), if any."""
    if not value.startswith("/api/"):
        return None
    keys = parse_qs(urlparse(value).query).get("key")
    return keys[0] if keys else None


def resolve_media_url(value: str | None, proxy_path: str = DEFAULT_PROXY_PATH) -> str:
    """Return a stable, proxy-form URL for a raw stored value.

    Rules:
        - empty -> ``""``
        - already under ``/api/`` -> unchanged
        - absolute URL on a bucket host -> proxy URL for the object key
        - any other absolute URL -> unchanged
        - anything else is treated as a storage key -> proxy URL

    Args:
        value: Raw URL or storage key.
        proxy_path: Path of the media proxy endpoint.
    """
    if not value:
        return ""
    if value.startswith("/api/"):
        return value
    if _ABSOLUTE_URL.match(value):
        match = _BUCKET_URL.match(value)
        if match:
            return proxy_url_for_key(unquote(match.group(1)), proxy_path)
        return value
    return proxy_url_for_key(value, proxy_path)
