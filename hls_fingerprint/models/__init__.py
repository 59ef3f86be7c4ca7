"""Data models for playlists and segment fingerprints."""

from .fingerprint_models import SegmentFingerprint, format_rfc3339_nano
from .playlist_models import (
    DecodedPlaylist,
    MasterPlaylist,
    MediaPlaylist,
    PlaylistKind,
    Segment,
    Variant,
)

__all__ = [
    "DecodedPlaylist",
    "MasterPlaylist",
    "MediaPlaylist",
    "PlaylistKind",
    "Segment",
    "Variant",
    "SegmentFingerprint",
    "format_rfc3339_nano",
]
