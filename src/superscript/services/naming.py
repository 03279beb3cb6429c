"""Derive file names for documents that have not been named yet."""

import re
import time
from datetime import datetime
from typing import Callable, Optional

MAX_STEM_LENGTH = 50

_HEADING_MARKERS = re.compile(r"^#+\s*")
_INVALID_FILENAME_CHARS = re.compile(r'[/\\:*?"<>|]')


def stem_from_content(content: str, max_length: int = MAX_STEM_LENGTH) -> Optional[str]:
    """
    Derive a file name stem from the first usable line of a document.

    Heading markers and characters that are invalid in file names are removed.
    Names longer than ``max_length`` are cut back to the last space inside the
    limit so no word is split; a single long word is cut hard.

    Args:
        content: Document text
        max_length: Longest stem to return

    Returns:
        The stem, or None when no line has usable text

    Example:
        >>> stem_from_content("# Groceries\\n- milk")
        'Groceries'
    """
    for line in content.split("\n"):
        cleaned = _INVALID_FILENAME_CHARS.sub("", _HEADING_MARKERS.sub("", line)).strip()
        if not cleaned:
            continue
        if len(cleaned) <= max_length:
            return cleaned
        truncated = cleaned[:max_length]
        last_space = truncated.rfind(" ")
        # Cutting at the space can leave trailing whitespace from runs of spaces
        return truncated[:last_space].rstrip() if last_space > 0 else truncated
    return None


class MonotonicClock:
    """
    Millisecond timestamps that never repeat or go backwards.

    Each call returns ``max(now, last_issued + 1)``, so several names
    requested within the same millisecond still sort in request order.
    """

    def __init__(self, now: Callable[[], float] = time.time) -> None:
        """
        Args:
            now: Wall clock returning seconds since the epoch
        """
        self._now = now
        self._last_issued = 0

    def next_millis(self) -> int:
        """Return the next timestamp in milliseconds since the epoch."""
        issued = max(int(self._now() * 1000), self._last_issued + 1)
        self._last_issued = issued
        return issued


_default_clock = MonotonicClock()


def format_timestamp_stem(millis: int) -> str:
    """Format a millisecond timestamp as a file name stem (local time, no colons)."""
    moment = datetime.fromtimestamp(millis / 1000)
    return f"{moment:%Y-%m-%d %H.%M.%S}.{millis % 1000:03d}"


def fallback_stem(clock: Optional[MonotonicClock] = None) -> str:
    """Return a unique timestamp stem for documents without a usable first line."""
    return format_timestamp_stem((clock or _default_clock).next_millis())


def resolve_stem(
    content: str,
    max_length: int = MAX_STEM_LENGTH,
    clock: Optional[MonotonicClock] = None,
) -> str:
    """Content-derived stem, or the timestamp fallback."""
    return stem_from_content(content, max_length) or fallback_stem(clock)
