# Overview: Derived values computed from number records; pure functions, no database work.

"""
Derived Fields

- digital_root: the "sum" shown next to every mobile number
- evaluate_rts_transition: whether a Non-RTS number has reached its RTS date
- safe_custody_due: whether a COCP number's safe-custody date has arrived

All functions are pure. Callers persist results and write the Activity.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime

from ..models.numbers import STATUS_NON_RTS, STATUS_RTS


def digital_root(mobile: str) -> int:
    """
    Reduce the digits of a mobile number to a single digit.

    "9876543210" -> 45 -> 9. Returns 0 only when every digit is zero.
    Characters that are not digits are skipped.
    """
    total = sum(int(ch) for ch in mobile if ch.isdigit())
    while total > 9:
        total = sum(int(ch) for ch in str(total))
    return total


@dataclass(frozen=True)
class RtsState:
    """The slice of a number record the RTS transition reads and writes."""
    mobile: str
    status: str
    rts_date: datetime | date | None

    @classmethod
    def of(cls, record) -> "RtsState":
        return cls(mobile=record.mobile, status=record.status, rts_date=record.rts_date)


def _as_date(value: datetime | date) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def is_rts_due(rts_date: datetime | date | None, now: datetime) -> bool:
    """True when rts_date falls on or before today's date (time of day ignored)."""
    if rts_date is None:
        return False
    return _as_date(rts_date) <= _as_date(now)


def evaluate_rts_transition(record: RtsState, now: datetime) -> RtsState:
    """
    Flip a due Non-RTS record to RTS and clear its date.

    Returns the same object when nothing changes, so callers can test
    `result is record`.
    """
    if record.status != STATUS_NON_RTS or record.rts_date is None:
        return record
    if not is_rts_due(record.rts_date, now):
        return record
    return replace(record, status=STATUS_RTS, rts_date=None)


def safe_custody_due(record, now: datetime) -> bool:
    if record.number_type != "COCP":
        return False
    if record.safe_custody_date is None or record.safe_custody_notified:
        return False
    return _as_date(record.safe_custody_date) <= _as_date(now)
