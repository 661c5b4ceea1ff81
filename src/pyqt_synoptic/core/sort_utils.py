"""Sorting utilities."""

import re
from typing import Iterable, List, TypeVar

T = TypeVar("T")

_DIGITS_RE = re.compile(r"(\d+)")


def natural_sort(items: Iterable[T]) -> List[T]:
    """Return a naturally sorted list for human-friendly ordering ("plan2" before "plan10")."""
    def sort_key(value: T):
        parts = _DIGITS_RE.split(str(value))
        return [(0, int(p), "") if p.isdigit() else (1, 0, p.lower()) for p in parts]

    return sorted(list(items), key=sort_key)
