from typing import List, Sequence, TypeVar

from marketing_cms.extensions import db

T = TypeVar("T")


def compact_order(items: Sequence[T], order_field: str = "order") -> List[T]:
    """
    Re-assigns sequential order values (1..N) following the given sequence.

    Rows are first parked on negative values and flushed, so a unique
    (parent, order) constraint holds after every UPDATE even when two
    rows swap places.
    """
    items = list(items)

    for index, item in enumerate(items, start=1):
        setattr(item, order_field, -index)
    db.session.flush()

    for index, item in enumerate(items, start=1):
        setattr(item, order_field, index)
    db.session.flush()

    return items


def apply_requested_order(items: Sequence[T], requested: dict, order_field: str = "order") -> List[T]:
    """
    Sort `items` by the positions in `requested` (id -> order).

    Items missing from `requested` keep their current position. On a tie
    the moved item goes first, then the current relative order decides.
    """
    def key(item):
        current = getattr(item, order_field)
        if item.id in requested:
            return (requested[item.id], 0, current)
        return (current, 1, current)

    return sorted(items, key=key)
