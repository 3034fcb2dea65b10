"""
core/pagination.py -- Page arithmetic shared by every paginated listing.

Pages are 1-based on the wire. Stores receive an offset/limit pair computed
here, and routes wrap the store result with page_meta() so every listing in
the API reports the same {page, page_size, pages, total} envelope.
"""

import math
from dataclasses import dataclass

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageMeta:
    page: int
    page_size: int
    pages: int
    total: int


def offset_for(page: int, page_size: int) -> int:
    """Return the row offset of the first item on a 1-based page."""
    return (max(page, 1) - 1) * page_size


def page_meta(page: int, page_size: int, total: int) -> PageMeta:
    """Build the metadata block for a listing of `total` rows.

    An empty listing reports zero pages rather than one empty page.
    """
    pages = math.ceil(total / page_size) if page_size > 0 else 0
    return PageMeta(page=max(page, 1), page_size=page_size, pages=pages, total=total)
