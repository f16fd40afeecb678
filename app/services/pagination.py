# 페이지네이션: page 는 1부터, pages = ceil(total / page_size)

import math
from dataclasses import dataclass, field
from typing import Generic, List, Sequence, TypeVar

from app.services.errors import InvalidArgument

T = TypeVar("T")

MAX_PAGE_SIZE = 100


@dataclass
class Page(Generic[T]):
    items: List[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 10

    @property
    def pages(self) -> int:
        return page_count(self.total, self.page_size)


def validate_page(page: int, page_size: int) -> None:
    if page < 1:
        raise InvalidArgument("page must be >= 1")
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise InvalidArgument(f"page_size must be between 1 and {MAX_PAGE_SIZE}")


def page_count(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if total > 0 else 0


def offset_of(page: int, page_size: int) -> int:
    return (page - 1) * page_size


def paginate(rows: Sequence[T], page: int, page_size: int) -> Page[T]:
    """이미 필터링된 전체 결과에서 한 페이지를 잘라낸다. 범위 밖 page 는 빈 목록."""
    validate_page(page, page_size)
    start = offset_of(page, page_size)
    return Page(items=list(rows[start:start + page_size]), total=len(rows), page=page, page_size=page_size)
