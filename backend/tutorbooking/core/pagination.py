"""Page/offset arithmetic shared by the listing operations."""

import math
from typing import Dict

from .config import settings


def clamp_page(page: int | None) -> int:
    return max(1, int(page or 1))


def clamp_per_page(per_page: int | None) -> int:
    size = int(per_page or settings.default_page_size)
    return min(max(1, size), settings.max_page_size)


def build_pagination(page: int, per_page: int, total: int) -> Dict[str, int]:
    """``total_pages`` is never below 1, even for an empty result."""
    return {
        "page": page,
        "per_page": per_page,
        "total": total,
        "total_pages": max(1, math.ceil(total / per_page)) if per_page else 1,
    }
