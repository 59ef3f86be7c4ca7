"""Computes the fingerprint record for a downloaded segment."""

from __future__ import annotations

import hashlib
import logging
import time
from typing import Callable, Optional

from ..models import Segment, SegmentFingerprint
from ..utils.http_client import FetchResponse

Clock = Callable[[], int]


class SegmentProcessor:
    """Hashes segment payloads with SHA-256 and stamps them with the observation time."""

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock or time.time_ns

    def process(self, segment: Segment, response: FetchResponse) -> SegmentFingerprint:
        """Drains ``response`` and fingerprints the payload; the response is always closed."""

        try:
            payload = response.read_all()
        finally:
            response.close()
        return self.fingerprint(segment, payload, url=response.url)

    def fingerprint(self, segment: Segment, payload: bytes, url: Optional[str] = None) -> SegmentFingerprint:
        digest = hashlib.sha256(payload).hexdigest()
        record = SegmentFingerprint(
            sequence_id=segment.sequence_id,
            size_bytes=len(payload),
            sha256=digest,
            observed_at_ns=self._clock(),
            uri=url or segment.uri,
        )
        logging.debug("Fingerprinted segment %s (%s bytes)", segment.sequence_id, record.size_bytes)
        return record
