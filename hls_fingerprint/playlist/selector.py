"""Rendition selection policy."""

from __future__ import annotations

from typing import Sequence

from ..errors import NoVariantsAvailable
from ..models import Variant


def select_variant(variants: Sequence[Variant]) -> Variant:
    """Returns the lowest-bandwidth variant; the earliest one wins a tie."""

    if not variants:
        raise NoVariantsAvailable()

    chosen = variants[0]
    for variant in variants[1:]:
        if variant.bandwidth < chosen.bandwidth:
            chosen = variant
    return chosen
