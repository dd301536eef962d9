"""Map a listing of any length onto a fixed number of terminal rows."""

from __future__ import annotations

from typing import Tuple


def window(total: int, selected: int, rows: int) -> Tuple[int, int]:
    """Return ``(first, count)`` of the entries to draw.

    The head of the listing is shown while the selection sits in the top half
    of the window, the tail once it reaches the bottom half, and otherwise the
    window is centred on the selection.  When ``count`` is odd the extra row
    goes below the selection.
    """
    if total <= 0 or rows <= 0:
        return 0, 0
    count = min(rows, total)
    half = count // 2
    if selected < half:
        return 0, count
    if selected >= total - half:
        return total - count, count
    return selected - half, count


def page_step(rows: int) -> int:
    """Number of entries a page up/down moves the selection."""
    return max(rows // 2, 1)


__all__ = ["window", "page_step"]
