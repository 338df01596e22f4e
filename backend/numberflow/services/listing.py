# Overview: Generic filter/sort/paginate helpers shared by every listing route.

"""
Listing Utilities

Records may be mappings (e.g. to_dict() output) or objects with attributes.

SORT POLICY:
- None sorts last in both directions
- str compares locale-aware (casefolded collation key)
- date/datetime compares by instant
- anything else uses native < / >
- descending negates the comparator; Python's sort is stable, so ties keep
  their input order
"""

from __future__ import annotations

import locale
import math
from dataclasses import dataclass
from datetime import date, datetime
from functools import cmp_to_key
from typing import Any, Callable, Iterable, Mapping, Sequence


ASCENDING = "ascending"
DESCENDING = "descending"
SORT_DIRECTIONS = (ASCENDING, DESCENDING)

# Wildcard sentinel accepted by filter dropdowns
ALL = "all"


def field_value(record: Any, key: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(key)
    return getattr(record, key, None)


def _collation_key(value: str) -> str:
    return locale.strxfrm(value.casefold())


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def compare_values(a: Any, b: Any) -> int:
    """Three-way comparison of two non-None field values."""
    if isinstance(a, str) and isinstance(b, str):
        ka, kb = _collation_key(a), _collation_key(b)
        if ka == kb:
            # Casefold ties fall back to code point order
            ka, kb = a, b
    elif isinstance(a, (date, datetime)) and isinstance(b, (date, datetime)):
        ka, kb = _as_datetime(a), _as_datetime(b)
    else:
        ka, kb = a, b

    if ka < kb:
        return -1
    if ka > kb:
        return 1
    return 0


def sort_records(records: Iterable[Any], key: str, direction: str = ASCENDING) -> list:
    """Return a new list ordered by a single field."""
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"direction must be one of {', '.join(SORT_DIRECTIONS)}")

    sign = -1 if direction == DESCENDING else 1

    def _cmp(x, y) -> int:
        a = field_value(x, key)
        b = field_value(y, key)
        if a is None and b is None:
            return 0
        if a is None:
            return 1
        if b is None:
            return -1
        return sign * compare_values(a, b)

    return sorted(records, key=cmp_to_key(_cmp))


def paginate(records: Sequence[Any], page: int, page_size: int) -> list:
    """
    1-indexed page slice. Pages outside the data (including page < 1)
    come back empty.
    """
    if page < 1 or page_size < 1:
        return []
    start = (page - 1) * page_size
    if start >= len(records):
        return []
    return list(records[start:start + page_size])


def total_pages(count: int, page_size: int) -> int:
    if page_size < 1:
        return 0
    return math.ceil(count / page_size)


@dataclass(frozen=True)
class Predicate:
    """
    One field condition.

    mode "exact" compares for equality, "contains" does a case-insensitive
    substring match. A value of ALL (or None / "") matches every record.
    """
    field: str
    value: Any
    mode: str = "exact"

    def is_wildcard(self) -> bool:
        return self.value is None or self.value == "" or self.value == ALL

    def matches(self, record: Any) -> bool:
        if self.is_wildcard():
            return True
        actual = field_value(record, self.field)
        if self.mode == "contains":
            if actual is None:
                return False
            return str(self.value).casefold() in str(actual).casefold()
        return actual == self.value


def exact(field: str, value: Any) -> Predicate:
    return Predicate(field=field, value=value, mode="exact")


def contains(field: str, value: Any) -> Predicate:
    return Predicate(field=field, value=value, mode="contains")


def filter_by_predicate(records: Iterable[Any], predicates: Iterable[Predicate | Callable[[Any], bool]]) -> list:
    """Keep records matching every predicate (logical AND)."""
    checks = [p.matches if isinstance(p, Predicate) else p for p in predicates]
    return [r for r in records if all(check(r) for check in checks)]


@dataclass
class ListingQuery:
    """Filter + sort + page request parsed from query parameters."""
    predicates: list
    sort_key: str | None = None
    sort_direction: str = ASCENDING
    page: int = 1
    page_size: int = 10

    def apply(self, records: Iterable[Any]) -> dict:
        rows = filter_by_predicate(records, self.predicates)
        if self.sort_key:
            rows = sort_records(rows, self.sort_key, self.sort_direction)
        return {
            "items": paginate(rows, self.page, self.page_size),
            "count": len(rows),
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": total_pages(len(rows), self.page_size),
        }
