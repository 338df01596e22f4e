"""
RTS sweep tests: due numbers flip to RTS, safe custody notices fire once.
"""

from datetime import datetime

from numberflow.models import Activity, NumberRecord
from numberflow.services.sweep_service import RtsSweeper, run_sweep


NOW = datetime(2024, 6, 1, 9, 0)


class TestRunSweep:

    def test_due_numbers_become_rts(self, make_number, db_session):
        due = make_number("9876543210", rts_date=datetime(2024, 6, 1))
        later = make_number("9123456780", rts_date=datetime(2024, 6, 2))

        result = run_sweep(NOW)
        assert result.rts_transitions == ["9876543210"]

        db_session.refresh(due)
        db_session.refresh(later)
        assert due.status == "RTS"
        assert due.rts_date is None
        assert later.status == "Non-RTS"
        assert later.rts_date is not None

    def test_writes_one_system_activity_per_transition(self, make_number, db_session):
        make_number("9876543210", rts_date=datetime(2024, 5, 1))
        make_number("9123456780", rts_date=datetime(2024, 5, 2))

        run_sweep(NOW)
        activities = db_session.query(Activity).filter_by(employee_name="System").all()
        assert len(activities) == 2
        assert {a.action for a in activities} == {"Auto-updated to RTS"}

    def test_second_pass_changes_nothing(self, make_number):
        make_number("9876543210", rts_date=datetime(2024, 5, 1))
        assert run_sweep(NOW).changed
        assert not run_sweep(NOW).changed

    def test_safe_custody_notice_fires_once(self, make_number, db_session):
        number = make_number(
            "9876543210",
            status="RTS",
            number_type="COCP",
            safe_custody_date=datetime(2024, 6, 1),
        )

        assert run_sweep(NOW).safe_custody_notices == ["9876543210"]
        assert run_sweep(NOW).safe_custody_notices == []

        db_session.refresh(number)
        assert number.safe_custody_notified is True
        notices = db_session.query(Activity).filter_by(action="Safe Custody Date Arrived").count()
        assert notices == 1

    def test_ignores_numbers_already_rts(self, make_number, db_session):
        make_number("9876543210", status="RTS")
        result = run_sweep(NOW)
        assert not result.changed
        assert db_session.query(NumberRecord).one().status == "RTS"


class TestRtsSweeper:

    def test_start_and_stop(self, app, db_session):
        sweeper = RtsSweeper(app, interval_seconds=60)
        sweeper.start()
        try:
            assert sweeper.running
            sweeper.start()
            assert sweeper.running
        finally:
            sweeper.stop()
        assert not sweeper.running

    def test_stop_without_start(self, app):
        sweeper = RtsSweeper(app, interval_seconds=60)
        sweeper.stop()
        assert not sweeper.running


class TestSweepCommand:

    def test_cli_runs_one_pass(self, app, make_number):
        make_number("9876543210", rts_date=datetime(2024, 5, 1))

        result = app.test_cli_runner().invoke(args=["numbers", "sweep"])
        assert result.exit_code == 0
        assert "1 number(s) became RTS" in result.output
        assert "9876543210" in result.output
