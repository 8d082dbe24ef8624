"""
Marker categories: the operator-curated list of categories that flag pages
as needing attention (stubs, cleanup, etc.).

Text format — one ``*``-prefixed entry per category; anything before the
first ``*`` is preamble and ignored::

    Categories whose pages need help:
    * Stubs
    * Articles needing cleanup

Blank text, or the single ``-`` sentinel, disables suggestions without
removing the message.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Optional

from edit_similar.utils.names import normalize_name

logger = logging.getLogger(__name__)

DISABLED_SENTINEL = "-"

MarkerSet = tuple[str, ...]


def is_disabled_text(text: Optional[str]) -> bool:
    """Return ``True`` if ``text`` switches the marker list off."""
    return text is None or text.strip() in ("", DISABLED_SENTINEL)


def parse_marker_text(text: Optional[str]) -> Optional[MarkerSet]:
    """Parse operator text into an ordered, de-duplicated marker set.

    Args:
        text: Raw message text, or ``None`` if the message does not exist.

    Returns:
        Normalised category names in their listed order, or ``None`` when
        the text is disabled or contains no usable entries.
    """
    if is_disabled_text(text):
        return None

    entries = text.split("*")[1:]
    names = (normalize_name(entry) for entry in entries)
    markers = tuple(dict.fromkeys(name for name in names if name))
    return markers or None


class MarkerRegistry:
    """Loads the marker set from a text source.

    The source is called on every ``load()`` so that edits to the marker
    list take effect on the next suggestion without a restart.

    Args:
        source: Zero-argument callable returning the raw marker text, or
            ``None`` if it is not set.
    """

    def __init__(self, source: Callable[[], Optional[str]]) -> None:
        self._source = source

    @classmethod
    def from_text(cls, text: Optional[str]) -> "MarkerRegistry":
        return cls(lambda: text)

    def load(self) -> Optional[MarkerSet]:
        markers = parse_marker_text(self._source())
        if markers is None:
            logger.debug("Marker categories disabled or empty; suggestions are off.")
        return markers
