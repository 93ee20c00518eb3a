"""Pagination helpers."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar, Union

from sqlalchemy.orm import Query

T = TypeVar("T")

DEFAULT_LIMIT = 10
MAX_LIMIT = 200
DEFAULT_PAGE_SIZE = 25


@dataclass
class Page(Generic[T]):
    """
    One window of a scoped, filtered result set.

    Attributes:
        items: Rows in the window
        total: Number of rows before windowing
        limit: Window size that was applied
        offset: Number of rows skipped
    """

    items: list[T] = field(default_factory=list)
    total: int = 0
    limit: int = DEFAULT_LIMIT
    offset: int = 0

    @property
    def has_next(self) -> bool:
        return self.offset + len(self.items) < self.total


def clamp_window(
    limit: Optional[int],
    offset: Optional[int],
    max_limit: int = MAX_LIMIT,
    default_limit: int = DEFAULT_LIMIT
) -> tuple[int, int]:
    """
    Clamp limit/offset; return (limit, offset).

    A missing, zero or negative limit becomes the default rather than an
    unbounded or failing request. A missing or negative offset becomes 0.
    """
    if limit is None or limit <= 0:
        limit = default_limit
    limit = min(limit, max_limit)
    offset = max(0, offset or 0)
    return limit, offset


def paginate(
    source: Union[Query, Sequence[T]],
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    max_limit: int = MAX_LIMIT,
    default_limit: int = DEFAULT_LIMIT
) -> Page[T]:
    """
    Window an already scoped and filtered result set.

    Args:
        source: SQLAlchemy Query or in-memory sequence, already ordered
        limit: Maximum number of items returned
        offset: Number of items skipped
        max_limit: Upper bound applied to limit
        default_limit: Limit used when none (or a non-positive one) is given

    Returns:
        Page with the window and the pre-window total

    Example:
        >>> page = paginate(list(range(25)), limit=10, offset=20)
        >>> len(page.items), page.total
        (5, 25)
    """
    limit, offset = clamp_window(limit, offset, max_limit=max_limit, default_limit=default_limit)

    if isinstance(source, Query):
        total = source.order_by(None).count()
        items = source.limit(limit).offset(offset).all()
    else:
        total = len(source)
        items = list(source[offset:offset + limit])

    return Page(items=items, total=total, limit=limit, offset=offset)


def paginate_page(
    source: Union[Query, Sequence[T]],
    page: Optional[int] = 1,
    page_size: int = DEFAULT_PAGE_SIZE
) -> Page[T]:
    """
    Page-number variant used by the delivery listing view.

    Args:
        source: SQLAlchemy Query or in-memory sequence, already ordered
        page: 1-based page number; missing or < 1 means the first page
        page_size: Items per page

    Returns:
        Page with ``offset = (page - 1) * page_size``
    """
    page = max(1, page or 1)
    return paginate(
        source,
        limit=page_size,
        offset=(page - 1) * page_size,
        max_limit=max(page_size, MAX_LIMIT),
    )
