"""Playlist decoding, rendition selection and resolution."""

from .decoder import PlaylistDecoder
from .resolver import PlaylistResolver
from .selector import select_variant

__all__ = ["PlaylistDecoder", "PlaylistResolver", "select_variant"]
