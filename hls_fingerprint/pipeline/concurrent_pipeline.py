"""Prefetching variant of the segment pipeline that still emits in playlist order."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import deque
from typing import Deque, Iterator, List, Mapping, Optional, Tuple

from ..errors import Cancelled
from ..models import MediaPlaylist, Segment, SegmentFingerprint
from ..utils.http_client import HttpClient
from ..utils.url_utils import resolve_reference
from .segment_pipeline import RecordCallback
from .segment_processor import SegmentProcessor

Slot = Tuple[Segment, "asyncio.Task[Tuple[bytes, str]]"]


class ConcurrentSegmentPipeline:
    """Downloads up to ``workers`` segments at once over aiohttp.

    In-flight downloads sit in an ordered window with one slot per segment.
    Slots are drained strictly front to back, so records come out in the same
    order as with :class:`SegmentPipeline`. The first failing slot cancels
    everything behind it.
    """

    def __init__(
        self,
        http_client: HttpClient,
        processor: Optional[SegmentProcessor] = None,
        workers: int = 4,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self.workers = workers
        self._http_client = http_client
        self._processor = processor or SegmentProcessor()

    def run(
        self,
        media_url: str,
        playlist: MediaPlaylist,
        headers: Optional[Mapping[str, str]] = None,
        on_record: Optional[RecordCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[SegmentFingerprint]:
        records: List[SegmentFingerprint] = []

        def emit(record: SegmentFingerprint) -> None:
            records.append(record)
            if on_record is not None:
                on_record(record)

        asyncio.run(self._run(media_url, playlist, headers, emit, cancel_event))
        return records

    async def _run(
        self,
        media_url: str,
        playlist: MediaPlaylist,
        headers: Optional[Mapping[str, str]],
        emit: RecordCallback,
        cancel_event: Optional[threading.Event],
    ) -> None:
        window: Deque[Slot] = deque()
        try:
            for segment in self._present_segments(playlist):
                if cancel_event is not None and cancel_event.is_set():
                    raise Cancelled(f"run cancelled before segment {segment.sequence_id}")
                task = asyncio.create_task(self._download(media_url, segment, headers, cancel_event))
                window.append((segment, task))
                if len(window) >= self.workers:
                    await self._emit_next(window, emit)
            while window:
                await self._emit_next(window, emit)
        finally:
            for _, task in window:
                task.cancel()
            await asyncio.gather(*(task for _, task in window), return_exceptions=True)
            await self._http_client.aclose()

    async def _emit_next(self, window: Deque[Slot], emit: RecordCallback) -> None:
        segment, task = window.popleft()
        payload, url = await task
        emit(self._processor.fingerprint(segment, payload, url=url))

    async def _download(
        self,
        media_url: str,
        segment: Segment,
        headers: Optional[Mapping[str, str]],
        cancel_event: Optional[threading.Event],
    ) -> Tuple[bytes, str]:
        segment_url = resolve_reference(media_url, segment.uri)
        payload = await self._http_client.fetch_bytes_async(segment_url, headers=headers, cancel_event=cancel_event)
        logging.debug("Downloaded segment %s", segment.sequence_id)
        return payload, segment_url

    @staticmethod
    def _present_segments(playlist: MediaPlaylist) -> Iterator[Segment]:
        for position, segment in enumerate(playlist.segments):
            if segment is None:
                logging.debug("Skipping absent segment entry at position %s", position)
                continue
            yield segment
