"""Framework-agnostic pagination primitives.

- ``Direction``: sort direction parsed leniently from query strings.
- ``PageRequest``: zero-based page index, page size and ordering.
- ``Page``: a slice of results plus the totals needed by clients.
- ``paginate``: applies a ``PageRequest`` to a Django QuerySet.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from django.db import models

T = TypeVar("T")
U = TypeVar("U")


class Direction(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: Optional[str]) -> Direction:
        """``"desc"`` in any case means descending; anything else ascending."""
        if value and value.strip().lower() == cls.DESC.value:
            return cls.DESC
        return cls.ASC


@dataclass(frozen=True)
class PageRequest:
    page: int = 0
    size: int = 10
    sort_by: str = "id"
    direction: Direction = Direction.ASC

    @property
    def offset(self) -> int:
        return self.page * self.size

    def ordering(self) -> List[str]:
        """ORM ``order_by`` arguments, with ``id`` as a stable tie-breaker."""
        prefix = "-" if self.direction is Direction.DESC else ""
        fields = [f"{prefix}{self.sort_by}"]
        if self.sort_by != "id":
            fields.append(f"{prefix}id")
        return fields


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T]
    total_elements: int
    request: PageRequest = field(default_factory=PageRequest)

    @property
    def total_pages(self) -> int:
        if self.request.size <= 0:
            return 0
        return math.ceil(self.total_elements / self.request.size)

    def map(self, fn: Callable[[T], U]) -> Page[U]:
        """Return a new page with ``fn`` applied to every item."""
        return Page(
            items=[fn(item) for item in self.items],
            total_elements=self.total_elements,
            request=self.request,
        )

    def to_dict(self, serialize: Callable[[T], Any]) -> Dict[str, Any]:
        return {
            "content": [serialize(item) for item in self.items],
            "page": self.request.page,
            "size": self.request.size,
            "total_elements": self.total_elements,
            "total_pages": self.total_pages,
        }


def paginate(queryset: models.QuerySet, page_request: PageRequest) -> Page:
    """Order, count and slice ``queryset`` according to ``page_request``.

    Pages past the end yield an empty item list with correct totals.
    """
    total = queryset.count()
    ordered = queryset.order_by(*page_request.ordering())
    start = page_request.offset
    items = list(ordered[start : start + page_request.size]) if start < total else []
    return Page(items=items, total_elements=total, request=page_request)
