"""Page/limit normalization shared by the admin listings."""

import math

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 50


def normalize_paging(page: int | None, limit: int | None) -> tuple[int, int]:
    """Clamp page to >= 1 and limit to 1..MAX_PAGE_SIZE; missing or zero values fall back to defaults."""
    page = max(1, page or 1)
    limit = min(MAX_PAGE_SIZE, max(1, limit or DEFAULT_PAGE_SIZE))
    return page, limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0
