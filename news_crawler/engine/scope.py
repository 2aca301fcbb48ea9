"""URL normalisation and the seed-relative scope rule."""

from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit


def normalize_url(url: str) -> str | None:
    """Canonical form used as the visited-set key; ``None`` for non-http(s) input."""

    try:
        parts = urlsplit(url.strip())
        hostname = parts.hostname
        port = parts.port
    except ValueError:
        return None
    if parts.scheme.lower() not in ("http", "https") or not hostname:
        return None
    netloc = hostname.lower()
    if port is not None:
        netloc = f"{netloc}:{port}"
    if parts.username:
        credentials = parts.username + (f":{parts.password}" if parts.password else "")
        netloc = f"{credentials}@{netloc}"
    path = parts.path or "/"
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return urlunsplit((parts.scheme.lower(), netloc, path, parts.query, ""))


def hostname_of(url: str) -> str:
    try:
        return (urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""


def is_in_scope(seed_url: str, link: str, include_same_host: bool = False) -> bool:
    """Whether ``link`` belongs to the site seeded at ``seed_url``.

    A link on a different host is in scope when that host is a subdomain of
    the seed host or merely contains it as a substring, so
    ``notreal-example.com`` counts for ``real-example.com``. Links on the seed
    host itself are only accepted with ``include_same_host`` and never for the
    seed URL.
    """

    base = hostname_of(seed_url)
    host = hostname_of(link)
    if not base or not host:
        return False
    if host == base:
        if not include_same_host:
            return False
        return normalize_url(link) != normalize_url(seed_url)
    return host.endswith("." + base) or base in host


__all__ = ["hostname_of", "is_in_scope", "normalize_url"]
