"""URL validation and relative-reference resolution."""

from __future__ import annotations

from urllib.parse import urljoin, urlsplit

from ..errors import URLParseError

SUPPORTED_SCHEMES = frozenset({"http", "https"})


def require_absolute_url(url: str) -> str:
    """Returns ``url`` unchanged if it is an absolute http(s) URL, else raises."""

    if not isinstance(url, str) or not url.strip():
        raise URLParseError(str(url), "empty URL")
    if url != url.strip() or any(ch.isspace() for ch in url):
        raise URLParseError(url, "URL contains whitespace")
    try:
        parts = urlsplit(url)
        # Accessing .port validates the netloc's port component.
        parts.port
    except ValueError as exc:
        raise URLParseError(url, str(exc)) from exc
    if not parts.scheme:
        raise URLParseError(url, "missing scheme")
    if parts.scheme.lower() not in SUPPORTED_SCHEMES:
        raise URLParseError(url, f"unsupported scheme {parts.scheme!r}")
    if not parts.hostname:
        raise URLParseError(url, "missing host")
    return url


def resolve_reference(base_url: str, reference: str) -> str:
    """Resolves a playlist entry's URI against the playlist that referenced it."""

    if not reference or not reference.strip():
        raise URLParseError(reference or "", "empty URI reference")
    try:
        resolved = urljoin(base_url, reference.strip())
    except ValueError as exc:
        raise URLParseError(reference, str(exc)) from exc
    return require_absolute_url(resolved)
