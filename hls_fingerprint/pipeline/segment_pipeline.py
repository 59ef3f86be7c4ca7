"""Sequential fetch-and-fingerprint loop over a media playlist."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterator, Mapping, Optional

from ..errors import Cancelled
from ..models import MediaPlaylist, SegmentFingerprint
from ..utils.http_client import HttpClient
from ..utils.url_utils import resolve_reference
from .segment_processor import SegmentProcessor

RecordCallback = Callable[[SegmentFingerprint], None]


class SegmentPipeline:
    """Fetches and fingerprints segments one at a time, in playlist order.

    The first failure stops the run: records already yielded stay valid, and
    nothing is produced for the failing segment or any segment after it.
    """

    def __init__(self, http_client: HttpClient, processor: Optional[SegmentProcessor] = None) -> None:
        self._http_client = http_client
        self._processor = processor or SegmentProcessor()

    def run(
        self,
        media_url: str,
        playlist: MediaPlaylist,
        headers: Optional[Mapping[str, str]] = None,
        on_record: Optional[RecordCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Iterator[SegmentFingerprint]:
        for position, segment in enumerate(playlist.segments):
            if segment is None:
                logging.debug("Skipping absent segment entry at position %s", position)
                continue
            if cancel_event is not None and cancel_event.is_set():
                raise Cancelled(f"run cancelled before segment {segment.sequence_id}")

            segment_url = resolve_reference(media_url, segment.uri)
            with self._http_client.open(segment_url, headers=headers, cancel_event=cancel_event) as response:
                record = self._processor.process(segment, response)

            if on_record is not None:
                on_record(record)
            yield record

    def process_all(
        self,
        media_url: str,
        playlist: MediaPlaylist,
        headers: Optional[Mapping[str, str]] = None,
        on_record: Optional[RecordCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> list[SegmentFingerprint]:
        return list(self.run(media_url, playlist, headers=headers, on_record=on_record, cancel_event=cancel_event))
