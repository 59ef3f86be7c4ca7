"""Fetches playlists, decodes them and checks they are the expected kind."""

from __future__ import annotations

import logging
import threading
from typing import Mapping, Optional, Tuple

from ..errors import UnexpectedPlaylistType
from ..models import DecodedPlaylist, MasterPlaylist, MediaPlaylist, PlaylistKind, Variant
from ..utils.http_client import HttpClient
from ..utils.url_utils import resolve_reference
from .decoder import PlaylistDecoder
from .selector import select_variant


class PlaylistResolver:
    """Resolves master and media playlists through a shared HTTP client."""

    def __init__(self, http_client: HttpClient, decoder: Optional[PlaylistDecoder] = None) -> None:
        self._http_client = http_client
        self._decoder = decoder or PlaylistDecoder()

    def resolve_master(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> MasterPlaylist:
        decoded = self._resolve(url, PlaylistKind.MASTER, headers, cancel_event)
        logging.info("Master playlist %s lists %s variants", url, len(decoded.master.variants))
        return decoded.master

    def resolve_media(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> MediaPlaylist:
        decoded = self._resolve(url, PlaylistKind.MEDIA, headers, cancel_event)
        logging.info("Media playlist %s lists %s segments", url, len(decoded.media.segments))
        return decoded.media

    def resolve_variant(
        self,
        master_url: str,
        master: MasterPlaylist,
        headers: Optional[Mapping[str, str]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Tuple[str, MediaPlaylist, Variant]:
        """Selects a rendition of ``master`` and resolves its media playlist.

        The variant URI is resolved against ``master_url``, the playlist that
        referenced it.
        """

        variant = select_variant(master.variants)
        media_url = resolve_reference(master_url, variant.uri)
        logging.info("Selected variant %s (bandwidth %s)", media_url, variant.bandwidth)
        media = self.resolve_media(media_url, headers=headers, cancel_event=cancel_event)
        return media_url, media, variant

    def _resolve(
        self,
        url: str,
        expected: PlaylistKind,
        headers: Optional[Mapping[str, str]],
        cancel_event: Optional[threading.Event],
    ) -> DecodedPlaylist:
        with self._http_client.open(url, headers=headers, cancel_event=cancel_event) as response:
            body = response.read_all()
        decoded = self._decoder.decode(body)
        if decoded.kind is not expected:
            raise UnexpectedPlaylistType(url, expected.value, decoded.kind.value)
        return decoded
