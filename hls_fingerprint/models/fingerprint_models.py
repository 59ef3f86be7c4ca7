"""Per-segment fingerprint records emitted by the pipeline."""

from __future__ import annotations

import json
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

NANOS_PER_SECOND = 1_000_000_000


def format_rfc3339_nano(epoch_ns: int) -> str:
    """Formats nanoseconds since the epoch as ``YYYY-MM-DDTHH:MM:SS.fffffffffZ``."""

    seconds, nanos = divmod(epoch_ns, NANOS_PER_SECOND)
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{nanos:09d}Z"


class SegmentFingerprint(BaseModel):
    """SHA-256 digest, size and observation time of one downloaded segment."""

    model_config = ConfigDict(frozen=True)

    sequence_id: int
    size_bytes: int = Field(ge=0)
    sha256: str = Field(pattern=r"^[0-9a-f]{64}$")
    observed_at_ns: int = Field(ge=0)
    uri: str = ""

    @property
    def observed_at(self) -> datetime:
        return datetime.fromtimestamp(self.observed_at_ns / NANOS_PER_SECOND, tz=timezone.utc)

    @property
    def timestamp(self) -> str:
        return format_rfc3339_nano(self.observed_at_ns)

    def to_line(self) -> str:
        return f"{self.timestamp} - segment {self.sequence_id} (size: {self.size_bytes}) hash: {self.sha256}"

    def to_json(self) -> str:
        payload = self.model_dump()
        payload["timestamp"] = self.timestamp
        return json.dumps(payload, sort_keys=True)
