from dataclasses import dataclass
from typing import Generic, List, TypeVar

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100

T = TypeVar("T")


@dataclass(frozen=True)
class Pagination:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page(Generic[T]):
    items: List[T]
    total: int
    pagination: Pagination

    @property
    def has_more(self) -> bool:
        return self.pagination.offset + len(self.items) < self.total


def parse_pagination(page=None, limit=None) -> Pagination:
    """Clamp page to >= 1 and limit to 1..100, falling back to the defaults."""
    try:
        parsed_page = int(page) if page is not None else DEFAULT_PAGE
    except (TypeError, ValueError):
        parsed_page = DEFAULT_PAGE
    try:
        parsed_limit = int(limit) if limit is not None else DEFAULT_LIMIT
    except (TypeError, ValueError):
        parsed_limit = DEFAULT_LIMIT
    return Pagination(page=max(1, parsed_page), limit=min(MAX_LIMIT, max(1, parsed_limit)))


def paginate(query, pagination: Pagination) -> Page:
    """Run a SQLAlchemy query for one page plus its exact total."""
    total = query.order_by(None).count()
    items = query.offset(pagination.offset).limit(pagination.limit).all()
    return Page(items=items, total=total, pagination=pagination)
