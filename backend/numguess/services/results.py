"""Structured outcomes for domain operations.

Expected failures (a guess out of range, someone else's game) come back as a
failed ``Result`` carrying an ``ErrorKind``; only storage faults raise.
"""

import enum
from dataclasses import dataclass
from typing import Any, Optional


class ErrorKind(enum.Enum):
    NOT_FOUND = 'not_found'
    FORBIDDEN = 'forbidden'
    GAME_NOT_ACTIVE = 'game_not_active'
    OUT_OF_RANGE = 'out_of_range'
    ATTEMPTS_EXHAUSTED = 'attempts_exhausted'
    CONCURRENT_SESSION_LIMIT_EXCEEDED = 'concurrent_session_limit_exceeded'
    VALIDATION_FAILED = 'validation_failed'
    PERSISTENCE_FAILURE = 'persistence_failure'


@dataclass(frozen=True)
class Result:
    ok: bool
    value: Any = None
    error: Optional[ErrorKind] = None
    message: str = ''

    @classmethod
    def success(cls, value=None):
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: ErrorKind, message: str):
        return cls(ok=False, error=error, message=message)


@dataclass(frozen=True)
class Page:
    items: list
    page: int
    page_size: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return -(-self.total_count // self.page_size) if self.page_size else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    def to_dict(self, serialize=lambda item: item):
        return {
            'items': [serialize(item) for item in self.items],
            'page': self.page,
            'page_size': self.page_size,
            'total_count': self.total_count,
            'total_pages': self.total_pages,
            'has_next': self.has_next,
            'has_previous': self.has_previous,
        }


MAX_PAGE = 10000


def normalize_paging(page, page_size, default_size=10, max_size=100, max_page=MAX_PAGE):
    """Clamp paging input: page below 1 becomes 1 and pages past ``max_page``
    are cut to it; a non-positive size becomes the default, and sizes above
    the cap are cut to the cap."""
    page = page if page and page > 0 else 1
    if not page_size or page_size <= 0:
        page_size = default_size
    return min(page, max_page), min(page_size, max_size)
