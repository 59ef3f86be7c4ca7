"""Exception hierarchy shared by the transport, playlist and pipeline layers."""

from __future__ import annotations

from typing import Optional


class HLSFingerprintError(Exception):
    """Base class for every failure surfaced to the caller."""


class URLParseError(HLSFingerprintError):
    """Raised when a URL is malformed or not absolute where it must be."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"invalid URL {url!r}: {reason}")
        self.url = url
        self.reason = reason


class TransportError(HLSFingerprintError):
    """Raised when a fetch fails (DNS, connection, non-success status)."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"GET {url} failed: {message}")
        self.url = url
        self.status_code = status_code


class FetchTimeout(HLSFingerprintError):
    """Raised when a request exceeds its timeout or deadline."""

    def __init__(self, url: str, seconds: Optional[float] = None) -> None:
        detail = f" after {seconds:g}s" if seconds is not None else ""
        super().__init__(f"GET {url} timed out{detail}")
        self.url = url
        self.seconds = seconds


class Cancelled(HLSFingerprintError):
    """Raised when the caller's cancellation event is set mid-run."""


class ReadError(HLSFingerprintError):
    """Raised when a response body cannot be drained completely."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"reading body of {url} failed: {message}")
        self.url = url


class ManifestParseError(HLSFingerprintError):
    """Raised when bytes cannot be decoded as an HLS playlist."""


class UnexpectedPlaylistType(HLSFingerprintError):
    """Raised when a playlist decodes to the other kind than the one requested."""

    def __init__(self, url: str, expected: str, actual: str) -> None:
        super().__init__(f"{url} is a {actual} playlist, expected a {expected} playlist")
        self.url = url
        self.expected = expected
        self.actual = actual


class NoVariantsAvailable(HLSFingerprintError):
    """Raised when a master playlist lists no variant streams."""

    def __init__(self) -> None:
        super().__init__("master playlist contains no variant streams")
