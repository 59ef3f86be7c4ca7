"""Ordered, tamper-evident fingerprinting of HLS media segments."""

from .errors import (
    Cancelled,
    FetchTimeout,
    HLSFingerprintError,
    ManifestParseError,
    NoVariantsAvailable,
    ReadError,
    TransportError,
    UnexpectedPlaylistType,
    URLParseError,
)
from .fingerprinter import StreamFingerprinter
from .utils.http_client import ClientConfig, HttpClient

__all__ = [
    "Cancelled",
    "ClientConfig",
    "FetchTimeout",
    "HLSFingerprintError",
    "HttpClient",
    "ManifestParseError",
    "NoVariantsAvailable",
    "ReadError",
    "StreamFingerprinter",
    "TransportError",
    "UnexpectedPlaylistType",
    "URLParseError",
]
