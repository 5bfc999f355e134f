"""Page-based pagination metadata."""

import math

from pydantic import BaseModel


class PageMeta(BaseModel):
    """Pagination metadata for list responses.

    ``current_page`` is clamped into ``[1, max(1, total_pages)]`` so a stale
    page number never yields an out-of-range slice.
    """

    current_page: int
    per_page: int
    total_items: int
    total_pages: int
    start_index: int  # 1-based, 0 when there are no items
    end_index: int

    @property
    def offset(self) -> int:
        return (self.current_page - 1) * self.per_page

    @classmethod
    def build(cls, total_items: int, page: int, per_page: int) -> "PageMeta":
        total_pages = math.ceil(total_items / per_page) if per_page > 0 else 0
        current_page = min(max(1, page), max(1, total_pages))
        start_index = (current_page - 1) * per_page + 1 if total_items > 0 else 0
        end_index = min(current_page * per_page, total_items)
        return cls(
            current_page=current_page,
            per_page=per_page,
            total_items=total_items,
            total_pages=total_pages,
            start_index=start_index,
            end_index=end_index,
        )
