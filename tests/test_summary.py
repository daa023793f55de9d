"""월별 출석 요약 집계 테스트입니다. 과거 형식 데이터 정규화와 관리자 보정을 함께 검증합니다."""

from datetime import date, datetime

from hrms.config import settings
from hrms.models.attendance import AttendanceEvent, LegacyAttendanceEntry
from hrms.services import attendance_service, summary_service
from tests.conftest import auth_headers


def _event(db, user, day, start_hour, end_hour):
    db.add(AttendanceEvent(
        user_id=user.user_id,
        work_date=day,
        clock_in_time=datetime(day.year, day.month, day.day, start_hour),
        clock_out_time=datetime(day.year, day.month, day.day, end_hour) if end_hour is not None else None,
        clock_in_latitude=0.0,
        clock_in_longitude=0.0,
        clock_in_ip="10.0.0.1",
        clock_in_device_id="seed",
        verification_status="Verified",
        overtime_approval_status="N/A",
    ))
    db.commit()


def test_summary_is_idempotent(db, seed_users):
    employee = seed_users["employee"]
    _event(db, employee, date(2025, 6, 2), 9, 18)
    _event(db, employee, date(2025, 6, 3), 9, 15)

    first = summary_service.summarize(db, employee.user_id, 2025, 6)
    second = summary_service.summarize(db, employee.user_id, 2025, 6)
    assert first == second
    assert first["present_days"] == 1.5
    assert first["full_days"] == 1
    assert first["half_days"] == 1
    assert first["underwork_alerts"] == 1
    assert first["overtime_hours"] == 1.0
    assert first["working_days"] == 25
    assert first["attendance_rate"] == 6.0


def test_legacy_rows_merge_into_one_day(db, seed_users):
    employee = seed_users["employee"]
    # same day recorded three ways: current event, dated legacy row, undated legacy row keyed by uid
    _event(db, employee, date(2025, 6, 3), 10, 12)
    db.add(LegacyAttendanceEntry(
        user_id=employee.user_id,
        date="2025-06-03",
        check_in=datetime(2025, 6, 3, 9, 0),
        check_out=datetime(2025, 6, 3, 13, 0),
    ))
    db.add(LegacyAttendanceEntry(
        uid=str(employee.user_id),
        check_in=datetime(2025, 6, 3, 13, 30),
        check_out=datetime(2025, 6, 3, 18, 0),
    ))
    db.add(LegacyAttendanceEntry(user_id=employee.user_id, date="2025-06-04", status="Present"))
    # another person's row must not leak in
    db.add(LegacyAttendanceEntry(uid="99999", date="2025-06-05", status="Present"))
    db.commit()

    summary = summary_service.summarize(db, employee.user_id, 2025, 6)
    assert [d["work_date"] for d in summary["days"]] == [date(2025, 6, 3), date(2025, 6, 4)]
    merged = summary["days"][0]
    assert merged["check_in"] == datetime(2025, 6, 3, 9, 0)
    assert merged["check_out"] == datetime(2025, 6, 3, 18, 0)
    assert merged["day_credit"] == 1.0
    assert merged["overtime_hours"] == 1.0
    assert summary["present_days"] == 2.0


def test_legacy_date_string_wins_over_timestamp(db, seed_users):
    employee = seed_users["employee"]
    db.add(LegacyAttendanceEntry(
        user_id=employee.user_id,
        date="2025-06-30",
        created_at=datetime(2025, 7, 1, 0, 30),
        status="Present",
    ))
    db.commit()
    june = summary_service.summarize(db, employee.user_id, 2025, 6)
    july = summary_service.summarize(db, employee.user_id, 2025, 7)
    assert june["present_days"] == 1.0
    assert july["present_days"] == 0.0


def test_override_replaces_computed_credit(db, seed_users):
    employee = seed_users["employee"]
    _event(db, employee, date(2025, 6, 2), 9, 12)
    before = summary_service.summarize(db, employee.user_id, 2025, 6)
    # 09:00-12:00 ends before the early-out hour, so it still earns a half day
    assert before["present_days"] == 0.5
    assert before["half_days"] == 1

    attendance_service.set_override(seed_users["hr"], employee.user_id, date(2025, 6, 2), 1.0, db, "Client visit")
    attendance_service.set_override(seed_users["admin"], employee.user_id, date(2025, 6, 6), 0.5, db)
    after = summary_service.summarize(db, employee.user_id, 2025, 6)
    assert after["present_days"] == 1.5
    assert after["overridden_days"] == 2
    assert after["underwork_alerts"] == 0


def test_override_api_validates_credit_and_role(client, seed_users):
    employee_id = seed_users["employee"].user_id
    hr_headers = auth_headers(client, "hr001")

    bad = client.put(f"/api/attendance/override/{employee_id}/2025-06-02", json={"day_credit": 0.75}, headers=hr_headers)
    assert bad.status_code == 400
    assert bad.json()["detail"] == "Invalid dayCredit"

    lead = client.put(
        f"/api/attendance/override/{employee_id}/2025-06-02",
        json={"day_credit": 1},
        headers=auth_headers(client, "lead001"),
    )
    assert lead.status_code == 403

    ok = client.put(f"/api/attendance/override/{employee_id}/2025-06-02", json={"day_credit": 1}, headers=hr_headers)
    assert ok.status_code == 200, ok.text
    assert ok.json()["updated_by"] == seed_users["hr"].user_id

    summary = client.get(
        f"/api/attendance/{employee_id}/summary",
        params={"year": 2025, "month": 6},
        headers=auth_headers(client, "lead001"),
    )
    assert summary.status_code == 200, summary.text
    assert summary.json()["present_days"] == 1.0
    assert summary.json()["days"][0]["overridden"] is True

    removed = client.delete(f"/api/attendance/override/{employee_id}/2025-06-02", headers=hr_headers)
    assert removed.status_code == 204
    missing = client.delete(f"/api/attendance/override/{employee_id}/2025-06-02", headers=hr_headers)
    assert missing.status_code == 404


def test_month_without_working_days_has_zero_rate(db, seed_users, monkeypatch):
    monkeypatch.setattr(settings, "WEEKLY_OFF_DAYS", [0, 1, 2, 3, 4, 5, 6])
    employee = seed_users["employee"]
    _event(db, employee, date(2025, 6, 2), 9, 18)
    summary = summary_service.summarize(db, employee.user_id, 2025, 6)
    assert summary["working_days"] == 0
    assert summary["attendance_rate"] == 0.0
    assert summary["present_days"] == 1.0
