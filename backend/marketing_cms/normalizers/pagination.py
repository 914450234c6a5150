# marketing_cms/normalizers/pagination.py
import math
from typing import Any, Callable, Dict, Iterable

from marketing_cms.utils.pagination import CursorMeta

NormalizeFn = Callable[[Any], Dict[str, Any]]


def normalize_offset_page(
    items: Iterable[Any],
    normalize_fn: NormalizeFn,
    *,
    page: int,
    per_page: int,
    total: int,
) -> Dict[str, Any]:
    """Envelope for numbered page listings (`?page=&per_page=`)."""
    return {
        "items": [normalize_fn(item) for item in items],
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": math.ceil(total / per_page),
        },
    }


def normalize_cursor_page(items: Iterable[Any], normalize_fn: NormalizeFn, meta: CursorMeta) -> Dict[str, Any]:
    """Envelope for keyset listings; `next_cursor` is None on the last page."""
    return {
        "items": [normalize_fn(item) for item in items],
        "pagination": {
            "has_more": meta["has_more"],
            "next_cursor": meta["next_cursor"],
        },
    }
