"""Page/limit slicing and sorting of in-memory record lists."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class PageRef(BaseModel):
    page: int
    limit: int


class Pagination(BaseModel):
    next: PageRef | None = None
    prev: PageRef | None = None


def parse_page_params(
    query: dict[str, Any] | None,
    default_limit: int = DEFAULT_LIMIT,
) -> tuple[int, int]:
    """Read ``page``/``limit`` query values, falling back to defaults on junk input."""
    query = query or {}
    page = _positive_int(query.get("page"), DEFAULT_PAGE)
    limit = min(_positive_int(query.get("limit"), default_limit), MAX_LIMIT)
    return page, limit


def _positive_int(raw: Any, default: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


@dataclass
class Page(Generic[T]):
    items: list[T]
    total: int
    pagination: Pagination


def paginate(items: Sequence[T], page: int, limit: int) -> Page[T]:
    start = (page - 1) * limit
    end = page * limit
    pagination = Pagination()
    if end < len(items):
        pagination.next = PageRef(page=page + 1, limit=limit)
    if start > 0:
        pagination.prev = PageRef(page=page - 1, limit=limit)
    return Page(items=list(items[start:end]), total=len(items), pagination=pagination)


def dotted_get(record: Any, path: str) -> Any:
    """Resolve ``a.b.c`` against nested dicts or attribute-bearing objects."""
    value = record
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


def sort_by(
    items: Sequence[T],
    key: str | Callable[[T], Any],
    descending: bool = False,
) -> list[T]:
    """Stable sort; items whose key is missing always go last."""
    getter = key if callable(key) else (lambda item: dotted_get(item, key))
    present = [item for item in items if getter(item) is not None]
    missing = [item for item in items if getter(item) is None]
    return sorted(present, key=getter, reverse=descending) + missing


def parse_sort(raw: str | None, default: str) -> tuple[str, bool]:
    """``-created_at`` → (``created_at``, descending)."""
    value = (raw or default).strip() or default
    if value.startswith("-"):
        return value[1:], True
    return value, False
