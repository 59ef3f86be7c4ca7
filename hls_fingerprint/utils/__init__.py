"""Utility helpers for HTTP transport and URL handling."""

from .http_client import ClientConfig, FetchResponse, HttpClient
from .url_utils import require_absolute_url, resolve_reference

__all__ = ["ClientConfig", "FetchResponse", "HttpClient", "require_absolute_url", "resolve_reference"]
