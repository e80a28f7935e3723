"""Page arithmetic for paginated search results."""

from __future__ import annotations

import math


def max_page(total: int, per_page: int) -> int:
    """Number of pages needed for ``total`` results (0 when there are none)."""
    return math.ceil(max(total, 0) / per_page)


def offset_for(page: int, per_page: int) -> int:
    return (page - 1) * per_page


def is_valid_page(page: int, total: int, per_page: int) -> bool:
    return 1 <= page <= max_page(total, per_page)


def clamp_page(page: int, total: int, per_page: int) -> int:
    """Keep ``page`` within ``[1, max(1, max_page)]``."""
    return min(max(page, 1), max(1, max_page(total, per_page)))
