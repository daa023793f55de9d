"""휴가 승인/삭제가 출석 인정값에 반영되고 되돌려지는지 검증합니다."""

from datetime import date, datetime

import pytest

from hrms.models.attendance import AttendanceEvent
from hrms.models.leave import LeaveDayCoverage, LeaveRequest
from hrms.services import attendance_service, leave_service, reconciliation_service, summary_service
from hrms.utils.errors import ValidationError

TODAY = date(2025, 6, 1)
REASON = "Medical appointment and recovery"


def _half_day(db, user, day):
    db.add(AttendanceEvent(
        user_id=user.user_id,
        work_date=day,
        clock_in_time=datetime(day.year, day.month, day.day, 9),
        clock_out_time=datetime(day.year, day.month, day.day, 13),
        clock_in_latitude=0.0,
        clock_in_longitude=0.0,
        clock_in_ip="10.0.0.1",
        clock_in_device_id="seed",
        verification_status="Verified",
        overtime_approval_status="N/A",
    ))
    db.commit()


def _approved_leave(db, seed_users, start, end, payment_type, leave_type="emergency"):
    request = leave_service.submit(seed_users["employee"], leave_type, start, end, REASON, db, today=TODAY)
    return leave_service.decide(seed_users["hr"], request.request_id, "approved", db, payment_type=payment_type)


def _present(db, user):
    return summary_service.summarize(db, user.user_id, 2025, 6)["present_days"]


def test_paid_leave_then_delete_restores_summary(db, seed_users):
    employee = seed_users["employee"]
    _half_day(db, employee, date(2025, 6, 10))
    baseline = summary_service.summarize(db, employee.user_id, 2025, 6)
    assert baseline["present_days"] == 0.5

    request = _approved_leave(db, seed_users, date(2025, 6, 10), date(2025, 6, 11), "paid")
    covered = summary_service.summarize(db, employee.user_id, 2025, 6)
    assert covered["present_days"] == 2.0
    assert covered["paid_leave_days"] == 2
    assert covered["underwork_alerts"] == 0

    leave_service.delete(seed_users["hr"], request.request_id, db)
    assert db.query(LeaveDayCoverage).count() == 0
    assert db.query(LeaveRequest).count() == 0
    assert summary_service.summarize(db, employee.user_id, 2025, 6) == baseline


def test_applying_coverage_twice_is_idempotent(db, seed_users):
    employee = seed_users["employee"]
    request = _approved_leave(db, seed_users, date(2025, 6, 16), date(2025, 6, 18), "paid")
    once = _present(db, employee)

    reconciliation_service.apply_leave_coverage(db, request)
    db.commit()
    assert db.query(LeaveDayCoverage).filter(LeaveDayCoverage.leave_request_id == request.request_id).count() == 3
    assert _present(db, employee) == once == 3.0


def test_unpaid_leave_is_not_a_zero_day(db, seed_users):
    employee = seed_users["employee"]
    _approved_leave(db, seed_users, date(2025, 6, 20), date(2025, 6, 20), "unpaid")
    summary = summary_service.summarize(db, employee.user_id, 2025, 6)
    assert summary["present_days"] == 0.0
    assert summary["unpaid_leave_days"] == 1
    assert summary["zero_days"] == 0
    assert summary["days"][0]["status"] == "Unpaid Leave"


def test_rejected_leave_leaves_attendance_untouched(db, seed_users):
    employee = seed_users["employee"]
    _half_day(db, employee, date(2025, 6, 10))
    request = leave_service.submit(employee, "emergency", date(2025, 6, 10), date(2025, 6, 10), REASON, db, today=TODAY)
    leave_service.decide(seed_users["hr"], request.request_id, "rejected", db, rejection_reason="Project deadline")
    assert db.query(LeaveDayCoverage).count() == 0
    assert _present(db, employee) == 0.5


def test_override_wins_over_leave(db, seed_users):
    employee = seed_users["employee"]
    _approved_leave(db, seed_users, date(2025, 6, 24), date(2025, 6, 24), "paid")
    attendance_service.set_override(seed_users["admin"], employee.user_id, date(2025, 6, 24), 0.5, db)
    assert _present(db, employee) == 0.5


def test_monthly_quota_rechecked_at_approval(db, seed_users):
    employee = seed_users["employee"]
    first = leave_service.submit(employee, "monthly", date(2025, 6, 2), date(2025, 6, 3), REASON, db, today=TODAY)
    second = leave_service.submit(employee, "monthly", date(2025, 6, 9), date(2025, 6, 9), REASON, db, today=TODAY)
    leave_service.decide(seed_users["hr"], first.request_id, "approved", db, payment_type="paid")
    assert leave_service.approved_monthly_days(db, employee.user_id, 2025, 6) == 2

    with pytest.raises(ValidationError, match="Monthly leave limit exceeded"):
        leave_service.decide(seed_users["hr"], second.request_id, "approved", db, payment_type="paid")
    db.refresh(second)
    assert second.status == "pending"
