"""Decodes raw manifest bytes into tagged master/media playlist models."""

from __future__ import annotations

import logging
from typing import List, Optional

import m3u8

from ..errors import ManifestParseError
from ..models import DecodedPlaylist, MasterPlaylist, MediaPlaylist, Segment, Variant

PLAYLIST_HEADER = "#EXTM3U"


class PlaylistDecoder:
    """Wraps the ``m3u8`` parser and classifies its result as master or media."""

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict

    def decode(self, data: bytes) -> DecodedPlaylist:
        text = self._decode_text(data)
        try:
            parsed = m3u8.M3U8(text, strict=self.strict)
        except m3u8.ParseError as exc:
            raise ManifestParseError(f"malformed playlist at line {exc.lineno}: {exc.line}") from exc
        except KeyError as exc:
            raise ManifestParseError(f"malformed playlist: missing required attribute {exc}") from exc
        except (ValueError, TypeError, AttributeError) as exc:
            raise ManifestParseError(f"malformed playlist: {exc}") from exc

        if self._is_master(parsed):
            return DecodedPlaylist.of_master(self._to_master(parsed))
        return DecodedPlaylist.of_media(self._to_media(parsed))

    @staticmethod
    def _is_master(parsed: m3u8.M3U8) -> bool:
        if parsed.is_variant:
            return True
        if parsed.segments:
            return False
        # Rendition groups, I-frame streams and session tags only occur in master playlists.
        return bool(
            parsed.media
            or parsed.iframe_playlists
            or getattr(parsed, "session_data", None)
            or getattr(parsed, "session_keys", None)
        )

    def _decode_text(self, data: bytes) -> str:
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ManifestParseError(f"playlist is not valid UTF-8: {exc}") from exc
        if not text.lstrip().startswith(PLAYLIST_HEADER):
            raise ManifestParseError(f"playlist does not start with {PLAYLIST_HEADER}")
        return text

    def _to_master(self, parsed: m3u8.M3U8) -> MasterPlaylist:
        variants: List[Variant] = []
        for index, playlist in enumerate(parsed.playlists):
            if not playlist.uri:
                raise ManifestParseError(f"variant #{index} has no URI")
            info = playlist.stream_info
            bandwidth = info.bandwidth if info is not None else None
            if bandwidth is None:
                raise ManifestParseError(f"variant {playlist.uri} has no BANDWIDTH attribute")
            if bandwidth < 0:
                raise ManifestParseError(f"variant {playlist.uri} has negative bandwidth {bandwidth}")
            variants.append(
                Variant(
                    uri=playlist.uri,
                    bandwidth=bandwidth,
                    resolution=info.resolution if info is not None else None,
                    codecs=info.codecs if info is not None else None,
                )
            )
        logging.debug("Decoded master playlist with %s variants", len(variants))
        return MasterPlaylist(variants=tuple(variants))

    def _to_media(self, parsed: m3u8.M3U8) -> MediaPlaylist:
        media_sequence = parsed.media_sequence or 0
        segments: List[Optional[Segment]] = []
        for index, segment in enumerate(parsed.segments):
            if not segment.uri:
                segments.append(None)
                continue
            segments.append(
                Segment(
                    sequence_id=media_sequence + index,
                    uri=segment.uri,
                    duration=segment.duration,
                )
            )
        logging.debug("Decoded media playlist with %s segments", len(segments))
        return MediaPlaylist(
            segments=tuple(segments),
            media_sequence=media_sequence,
            ended=bool(parsed.is_endlist),
        )
