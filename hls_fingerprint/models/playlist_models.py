"""Pydantic models for decoded master and media playlists."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PlaylistKind(str, Enum):
    MASTER = "master"
    MEDIA = "media"


class Variant(BaseModel):
    """One rendition advertised by a master playlist."""

    model_config = ConfigDict(frozen=True)

    uri: str
    bandwidth: int = Field(ge=0)
    resolution: Optional[Tuple[int, int]] = None
    codecs: Optional[str] = None


class MasterPlaylist(BaseModel):
    """Variants in the order they appear in the manifest. May be empty."""

    model_config = ConfigDict(frozen=True)

    variants: Tuple[Variant, ...] = ()


class Segment(BaseModel):
    """A single media chunk referenced by a media playlist."""

    model_config = ConfigDict(frozen=True)

    sequence_id: int
    uri: str
    duration: Optional[float] = None


class MediaPlaylist(BaseModel):
    """Segments in delivery order; ``None`` marks a structurally absent entry."""

    model_config = ConfigDict(frozen=True)

    segments: Tuple[Optional[Segment], ...] = ()
    media_sequence: int = 0
    ended: bool = False

    @property
    def present_segments(self) -> Tuple[Segment, ...]:
        return tuple(segment for segment in self.segments if segment is not None)


class DecodedPlaylist(BaseModel):
    """Tagged result of decoding a manifest: exactly one of ``master``/``media`` is set."""

    model_config = ConfigDict(frozen=True)

    kind: PlaylistKind
    master: Optional[MasterPlaylist] = None
    media: Optional[MediaPlaylist] = None

    @model_validator(mode="after")
    def _check_tag(self) -> "DecodedPlaylist":
        if self.kind is PlaylistKind.MASTER and (self.master is None or self.media is not None):
            raise ValueError("master-tagged playlist must carry only a master payload")
        if self.kind is PlaylistKind.MEDIA and (self.media is None or self.master is not None):
            raise ValueError("media-tagged playlist must carry only a media payload")
        return self

    @classmethod
    def of_master(cls, master: MasterPlaylist) -> "DecodedPlaylist":
        return cls(kind=PlaylistKind.MASTER, master=master)

    @classmethod
    def of_media(cls, media: MediaPlaylist) -> "DecodedPlaylist":
        return cls(kind=PlaylistKind.MEDIA, media=media)
