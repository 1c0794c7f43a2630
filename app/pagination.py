"""Page metadata arithmetic.  Inputs are assumed to be validated already."""
import math
from typing import Sequence, TypeVar

from app.domain import Page, PaginationMeta, PaginationRequest

T = TypeVar("T")


def compute_meta(current_page: int, items_per_page: int, total_items: int) -> PaginationMeta:
    """
    Build the metadata block for one page of a listing.

    ``total_pages`` is ``ceil(total_items / items_per_page)``, which is 0
    for an empty collection; a page past the end therefore reports
    ``has_next_page=False`` and ``has_previous_page=True``.
    """
    total_pages = math.ceil(total_items / items_per_page) if total_items > 0 else 0
    return PaginationMeta(
        current_page=current_page,
        items_per_page=items_per_page,
        total_items=total_items,
        total_pages=total_pages,
        has_next_page=current_page < total_pages,
        has_previous_page=current_page > 1,
    )


def paginate(data: Sequence[T], request: PaginationRequest, total_items: int) -> Page[T]:
    """Pair a window of rows with the metadata for *request*."""
    return Page(data=list(data), meta=compute_meta(request.page, request.limit, total_items))
