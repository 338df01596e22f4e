# Overview: Background sweep that applies due RTS transitions and safe-custody notices.

"""
RTS Sweep

One pass:
- every Non-RTS number whose rts_date is today or earlier becomes RTS and
  its rts_date is cleared; one "System" Activity per number
- every COCP number whose safe-custody date has arrived gets one
  "Safe Custody Date Arrived" Activity and is flagged so it is not
  reported again

A pass commits once. A failed pass is rolled back and retried on the next
interval.

RtsSweeper runs passes on a daemon thread every RTS_SWEEP_INTERVAL_SECONDS
inside its own application context, and stops on stop() (event + join).
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime

from flask import Flask, current_app

from ..extensions import db
from ..models import NumberRecord
from ..models.numbers import STATUS_NON_RTS
from numberflow.time_utils import utcnow
from .activity_service import SYSTEM_ACTOR, log_activity
from .derived_fields import RtsState, evaluate_rts_transition, safe_custody_due


@dataclass
class SweepResult:
    rts_transitions: list = field(default_factory=list)
    safe_custody_notices: list = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.rts_transitions or self.safe_custody_notices)

    def to_dict(self) -> dict:
        return {
            "rts_transitions": list(self.rts_transitions),
            "safe_custody_notices": list(self.safe_custody_notices),
        }


def sweep_rts_transitions(now: datetime, result: SweepResult) -> None:
    candidates = db.session.query(NumberRecord).filter(
        NumberRecord.status == STATUS_NON_RTS,
        NumberRecord.rts_date.isnot(None),
    ).all()

    for number in candidates:
        before = RtsState.of(number)
        after = evaluate_rts_transition(before, now)
        if after is before:
            continue
        number.status = after.status
        number.rts_date = after.rts_date
        log_activity(
            SYSTEM_ACTOR,
            "Auto-updated to RTS",
            f"Number {number.mobile} automatically became RTS.",
            timestamp=now,
        )
        result.rts_transitions.append(number.mobile)
        current_app.logger.info("Number %s automatically became RTS", number.mobile)


def sweep_safe_custody(now: datetime, result: SweepResult) -> None:
    candidates = db.session.query(NumberRecord).filter(
        NumberRecord.number_type == "COCP",
        NumberRecord.safe_custody_date.isnot(None),
        NumberRecord.safe_custody_notified == False,  # noqa: E712
    ).all()

    for number in candidates:
        if not safe_custody_due(number, now):
            continue
        number.safe_custody_notified = True
        log_activity(
            SYSTEM_ACTOR,
            "Safe Custody Date Arrived",
            f"Safe Custody Date for COCP number {number.mobile} has arrived.",
            timestamp=now,
        )
        result.safe_custody_notices.append(number.mobile)
        current_app.logger.info("Safe custody date arrived for %s", number.mobile)


def run_sweep(now: datetime | None = None) -> SweepResult:
    """One sweep pass. Must run inside an application context."""
    now = now or utcnow()
    result = SweepResult()
    try:
        sweep_rts_transitions(now, result)
        sweep_safe_custody(now, result)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    current_app.logger.debug(
        "Sweep pass: %d RTS transition(s), %d safe custody notice(s)",
        len(result.rts_transitions),
        len(result.safe_custody_notices),
    )
    return result


class RtsSweeper:
    """Runs run_sweep() on a fixed interval in a background thread."""

    def __init__(self, app: Flask, interval_seconds: float = 5.0):
        self.app = app
        self.interval = interval_seconds
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.running:
                return
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._loop, name="rts-sweeper", daemon=True)
            self._thread.start()
        self.app.logger.info("RTS sweeper started (interval=%ss)", self.interval)

    def stop(self, timeout: float = 5.0) -> None:
        if self._thread is None:
            return
        self._stop_event.set()
        if self._thread.is_alive():
            self._thread.join(timeout=timeout)
        self._thread = None
        self.app.logger.info("RTS sweeper stopped")

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            with self.app.app_context():
                try:
                    run_sweep()
                except Exception:
                    self.app.logger.exception("RTS sweep pass failed")
                finally:
                    db.session.remove()
            self._stop_event.wait(self.interval)
