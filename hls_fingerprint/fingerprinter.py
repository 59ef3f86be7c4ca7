"""End-to-end driver: master playlist URL in, ordered segment fingerprints out."""

from __future__ import annotations

import logging
import threading
from typing import List, Mapping, Optional

from .models import SegmentFingerprint
from .pipeline import ConcurrentSegmentPipeline, SegmentPipeline, SegmentProcessor
from .pipeline.segment_pipeline import RecordCallback
from .playlist import PlaylistDecoder, PlaylistResolver
from .utils.http_client import HttpClient
from .utils.url_utils import require_absolute_url


class StreamFingerprinter:
    """Resolves a master playlist, picks a rendition and fingerprints its segments."""

    def __init__(
        self,
        http_client: HttpClient,
        workers: int = 1,
        decoder: Optional[PlaylistDecoder] = None,
        processor: Optional[SegmentProcessor] = None,
    ) -> None:
        self._resolver = PlaylistResolver(http_client, decoder)
        processor = processor or SegmentProcessor()
        if workers > 1:
            self._pipeline: SegmentPipeline | ConcurrentSegmentPipeline = ConcurrentSegmentPipeline(
                http_client, processor, workers=workers
            )
        else:
            self._pipeline = SegmentPipeline(http_client, processor)

    def run(
        self,
        master_url: str,
        headers: Optional[Mapping[str, str]] = None,
        on_record: Optional[RecordCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[SegmentFingerprint]:
        """Fingerprints every segment of the lowest-bandwidth rendition.

        ``on_record`` is called once per record as soon as it exists, so callers
        keep the records produced before a failure even though the failure itself
        propagates.
        """

        require_absolute_url(master_url)
        master = self._resolver.resolve_master(master_url, headers=headers, cancel_event=cancel_event)
        media_url, media, _ = self._resolver.resolve_variant(
            master_url, master, headers=headers, cancel_event=cancel_event
        )
        if not media.ended:
            logging.info("Media playlist %s has no ENDLIST tag; processing the current window only", media_url)

        if isinstance(self._pipeline, ConcurrentSegmentPipeline):
            records = self._pipeline.run(
                media_url, media, headers=headers, on_record=on_record, cancel_event=cancel_event
            )
        else:
            records = self._pipeline.process_all(
                media_url, media, headers=headers, on_record=on_record, cancel_event=cancel_event
            )
        logging.info("Fingerprinted %s segments from %s", len(records), media_url)
        return records
