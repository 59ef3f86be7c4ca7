"""Shared fakes: an in-memory stand-in for ``requests.Session`` and its responses."""

from __future__ import annotations

from typing import Dict, List, Optional, Union

import pytest

from hls_fingerprint.utils.http_client import ClientConfig, HttpClient

MASTER_URL = "https://cdn.example.com/live/master.m3u8"
LOW_URL = "https://cdn.example.com/live/low.m3u8"

MASTER_TEXT = b"""#EXTM3U
#EXT-X-STREAM-INF:BANDWIDTH=500000,RESOLUTION=640x360
low.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=2000000,RESOLUTION=1920x1080
high.m3u8
"""

MEDIA_TEXT = b"""#EXTM3U
#EXT-X-VERSION:3
#EXT-X-TARGETDURATION:10
#EXT-X-MEDIA-SEQUENCE:0
#EXTINF:10.0,
seg0.ts
#EXTINF:10.0,
seg1.ts
#EXT-X-ENDLIST
"""

EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


class FakeResponse:
    def __init__(
        self,
        body: bytes = b"",
        status_code: int = 200,
        reason: str = "OK",
        url: Optional[str] = None,
        error: Optional[Exception] = None,
        chunk_size: int = 3,
    ) -> None:
        self.body = body
        self.status_code = status_code
        self.reason = reason
        self.url = url
        self.error = error
        self.chunk_size = chunk_size
        self.closed = False

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self.body), self.chunk_size):
            yield self.body[start : start + self.chunk_size]
        if self.error is not None:
            raise self.error

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """Routes GETs by absolute URL to canned responses or exceptions."""

    def __init__(self, routes: Optional[Dict[str, Union[FakeResponse, Exception]]] = None) -> None:
        self.routes: Dict[str, Union[FakeResponse, Exception]] = dict(routes or {})
        self.calls: List[dict] = []

    def get(self, url, headers=None, timeout=None, stream=False, allow_redirects=True):
        self.calls.append(
            {"url": url, "headers": headers, "timeout": timeout, "stream": stream, "allow_redirects": allow_redirects}
        )
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(status_code=404, reason="Not Found", url=url)
        if isinstance(route, Exception):
            raise route
        if route.url is None:
            route.url = url
        return route

    @property
    def requested_urls(self) -> List[str]:
        return [call["url"] for call in self.calls]

    def close(self) -> None:
        pass


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def http_client(fake_session: FakeSession) -> HttpClient:
    return HttpClient(ClientConfig(timeout=5.0), session=fake_session)


@pytest.fixture
def stream_routes() -> Dict[str, FakeResponse]:
    return {
        MASTER_URL: FakeResponse(MASTER_TEXT),
        LOW_URL: FakeResponse(MEDIA_TEXT),
        "https://cdn.example.com/live/seg0.ts": FakeResponse(b"\x01\x02\x03\x04"),
        "https://cdn.example.com/live/seg1.ts": FakeResponse(b""),
    }
