"""End-to-end runs of StreamFingerprinter against in-memory HTTP routes."""

import hashlib

import pytest

from hls_fingerprint import StreamFingerprinter
from hls_fingerprint.errors import NoVariantsAvailable, UnexpectedPlaylistType, URLParseError
from hls_fingerprint.pipeline import SegmentProcessor

from .conftest import EMPTY_SHA256, LOW_URL, MASTER_URL, MEDIA_TEXT, FakeResponse


def make_fingerprinter(http_client, workers=1):
    return StreamFingerprinter(http_client, workers=workers, processor=SegmentProcessor(clock=lambda: 1))


class TestStreamFingerprinter:

    def test_low_bandwidth_rendition_end_to_end(self, http_client, fake_session, stream_routes):
        fake_session.routes.update(stream_routes)

        records = make_fingerprinter(http_client).run(MASTER_URL)

        assert fake_session.requested_urls == [
            MASTER_URL,
            LOW_URL,
            "https://cdn.example.com/live/seg0.ts",
            "https://cdn.example.com/live/seg1.ts",
        ]
        assert [r.sequence_id for r in records] == [0, 1]
        assert records[0].size_bytes == 4
        assert records[0].sha256 == hashlib.sha256(b"\x01\x02\x03\x04").hexdigest()
        assert records[1].size_bytes == 0
        assert records[1].sha256 == EMPTY_SHA256

    def test_concurrent_run_produces_same_records(self, http_client, fake_session, stream_routes, monkeypatch):
        fake_session.routes.update(stream_routes)
        bodies = {url: route.body for url, route in stream_routes.items()}

        async def fake_fetch(url, headers=None, cancel_event=None):
            return bodies[url]

        monkeypatch.setattr(http_client, "fetch_bytes_async", fake_fetch)

        records = make_fingerprinter(http_client, workers=4).run(MASTER_URL)

        assert [(r.sequence_id, r.size_bytes) for r in records] == [(0, 4), (1, 0)]

    def test_on_record_sees_each_record_once(self, http_client, fake_session, stream_routes):
        fake_session.routes.update(stream_routes)
        seen = []

        records = make_fingerprinter(http_client).run(MASTER_URL, on_record=seen.append)

        assert seen == records

    def test_relative_uris_resolve_against_referencing_playlist(self, http_client, fake_session):
        master_url = "https://cdn.example.com/events/2024/master/index.m3u8"
        media_url = "https://cdn.example.com/events/2024/video/low/index.m3u8"
        fake_session.routes[master_url] = FakeResponse(
            b"#EXTM3U\n#EXT-X-STREAM-INF:BANDWIDTH=300000\n../video/low/index.m3u8\n"
        )
        fake_session.routes[media_url] = FakeResponse(MEDIA_TEXT)
        fake_session.routes["https://cdn.example.com/events/2024/video/low/seg0.ts"] = FakeResponse(b"a")
        fake_session.routes["https://cdn.example.com/events/2024/video/low/seg1.ts"] = FakeResponse(b"b")

        records = make_fingerprinter(http_client).run(master_url)

        assert [r.uri for r in records] == [
            "https://cdn.example.com/events/2024/video/low/seg0.ts",
            "https://cdn.example.com/events/2024/video/low/seg1.ts",
        ]
        assert "https://cdn.example.com/events/2024/master/seg0.ts" not in fake_session.requested_urls

    def test_media_playlist_given_as_master(self, http_client, fake_session):
        fake_session.routes[MASTER_URL] = FakeResponse(MEDIA_TEXT)

        with pytest.raises(UnexpectedPlaylistType):
            make_fingerprinter(http_client).run(MASTER_URL)
        assert fake_session.requested_urls == [MASTER_URL]

    @pytest.mark.parametrize(
        "manifest",
        [
            b'#EXTM3U\n#EXT-X-MEDIA:TYPE=AUDIO,GROUP-ID="aud",NAME="English",URI="audio.m3u8"\n',
            b'#EXTM3U\n#EXT-X-I-FRAME-STREAM-INF:BANDWIDTH=100,URI="iframe.m3u8"\n',
        ],
    )
    def test_master_without_variants(self, http_client, fake_session, manifest):
        fake_session.routes[MASTER_URL] = FakeResponse(manifest)

        with pytest.raises(NoVariantsAvailable):
            make_fingerprinter(http_client).run(MASTER_URL)
        assert fake_session.requested_urls == [MASTER_URL]

    def test_invalid_master_url_fetches_nothing(self, http_client, fake_session):
        with pytest.raises(URLParseError):
            make_fingerprinter(http_client).run("not a url")
        assert fake_session.calls == []
