"""Attendance 출퇴근, 초과근무 검토, 조회 권한 회귀 테스트입니다."""

from datetime import date, datetime

import pytest

from hrms.config import settings
from hrms.models.office import OfficeLocation
from hrms.services import attendance_service
from hrms.services.geofence_service import PENDING_REVIEW, VERIFIED
from hrms.utils.errors import Conflict, Forbidden, NoOpenRecord
from tests.conftest import auth_headers

HQ = {"latitude": 23.0225, "longitude": 72.5714}


def _clock_in_body(**extra):
    return {**HQ, "device_id": "device-1", **extra}


def _add_office(db, whitelist=None):
    office = OfficeLocation(
        name="HQ",
        latitude=HQ["latitude"],
        longitude=HQ["longitude"],
        radius_meters=150,
        whitelisted_ips=whitelist if whitelist is not None else ["10.0.0.0/24"],
        is_active=True,
    )
    db.add(office)
    db.commit()
    db.refresh(office)
    return office


def test_double_clock_in_is_conflict(client, seed_users):
    headers = auth_headers(client, "emp001")
    first = client.post("/api/attendance/clock-in", json=_clock_in_body(), headers=headers)
    assert first.status_code == 201, first.text
    assert first.json()["verification_status"] == PENDING_REVIEW

    second = client.post("/api/attendance/clock-in", json=_clock_in_body(), headers=headers)
    assert second.status_code == 409


def test_clock_out_without_clock_in_is_not_found(client, seed_users):
    resp = client.post("/api/attendance/clock-out", json=_clock_in_body(), headers=auth_headers(client, "emp002"))
    assert resp.status_code == 404
    assert "no open clock-in" in resp.json()["detail"]


def test_clock_out_twice_is_conflict(client, seed_users):
    headers = auth_headers(client, "emp001")
    assert client.post("/api/attendance/clock-in", json=_clock_in_body(), headers=headers).status_code == 201
    out = client.post("/api/attendance/clock-out", json=_clock_in_body(), headers=headers)
    assert out.status_code == 200, out.text
    assert out.json()["overtime_approval_status"] == "N/A"
    again = client.post("/api/attendance/clock-out", json=_clock_in_body(), headers=headers)
    assert again.status_code == 409


def test_my_status_tracks_the_day(client, seed_users):
    headers = auth_headers(client, "emp001")
    before = client.get("/api/attendance/my-status", headers=headers).json()
    assert before["can_clock_in"] is True
    assert before["event"] is None

    client.post("/api/attendance/clock-in", json=_clock_in_body(), headers=headers)
    after = client.get("/api/attendance/my-status", headers=headers).json()
    assert after["can_clock_in"] is False
    assert after["can_clock_out"] is True
    assert after["event"]["clock_in_device_id"] == "device-1"


def test_whitelisted_ip_at_office_is_verified(client, db, seed_users):
    office = _add_office(db)
    resp = client.post(
        "/api/attendance/clock-in",
        json=_clock_in_body(),
        headers={**auth_headers(client, "emp001"), "X-Forwarded-For": "10.0.0.8, 172.16.0.1"},
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["verification_status"] == VERIFIED
    assert resp.json()["matched_office_id"] == office.office_id
    assert resp.json()["clock_in_ip"] == "10.0.0.8"


def test_block_policy_rejects_unverified_clock_in(db, seed_users, monkeypatch):
    monkeypatch.setattr(settings, "GEOFENCE_POLICY", "block")
    _add_office(db)
    with pytest.raises(Forbidden):
        attendance_service.clock_in(
            seed_users["employee"], HQ["latitude"] + 1, HQ["longitude"], "10.0.0.8", "device-1", db,
            now=datetime(2025, 6, 2, 9, 0),
        )


def test_service_clock_out_splits_overtime(db, seed_users):
    employee = seed_users["employee"]
    attendance_service.clock_in(
        employee, HQ["latitude"], HQ["longitude"], "10.0.0.8", "device-1", db,
        now=datetime(2025, 6, 2, 9, 0),
    )
    event = attendance_service.clock_out(
        employee, HQ["latitude"], HQ["longitude"], "10.0.0.8", "device-1", db,
        overtime_reason="Release night", now=datetime(2025, 6, 2, 18, 30),
    )
    assert event.total_hours == 9.5
    assert event.regular_hours == 8.0
    assert event.potential_overtime_hours == 1.5
    assert event.overtime_approval_status == "Pending"
    assert event.approved_overtime_hours == 0.0


def test_service_clock_out_needs_open_record(db, seed_users):
    with pytest.raises(NoOpenRecord):
        attendance_service.clock_out(
            seed_users["employee"], HQ["latitude"], HQ["longitude"], "10.0.0.8", "device-1", db,
            now=datetime(2025, 6, 2, 18, 0),
        )


def test_night_shift_closes_after_midnight(db, seed_users):
    employee = seed_users["employee"]
    attendance_service.clock_in(
        employee, HQ["latitude"], HQ["longitude"], "10.0.0.8", "device-1", db,
        now=datetime(2025, 6, 2, 22, 0),
    )
    event = attendance_service.clock_out(
        employee, HQ["latitude"], HQ["longitude"], "10.0.0.8", "device-1", db,
        now=datetime(2025, 6, 3, 6, 30),
    )
    assert event.work_date == date(2025, 6, 2)
    assert event.total_hours == 8.5

    # a closed shift from yesterday does not count as today's record
    with pytest.raises(NoOpenRecord):
        attendance_service.clock_out(
            employee, HQ["latitude"], HQ["longitude"], "10.0.0.8", "device-1", db,
            now=datetime(2025, 6, 3, 7, 0),
        )


def test_work_date_follows_business_timezone(db, seed_users, monkeypatch):
    monkeypatch.setattr(settings, "BUSINESS_TIMEZONE", "Asia/Kolkata")
    employee = seed_users["employee"]
    # 20:00 UTC is 01:30 the next morning in Kolkata
    event = attendance_service.clock_in(
        employee, HQ["latitude"], HQ["longitude"], "10.0.0.8", "device-1", db,
        now=datetime(2025, 6, 2, 20, 0),
    )
    assert event.work_date == date(2025, 6, 3)
    assert event.clock_in_time == datetime(2025, 6, 2, 20, 0)


def _overtime_event(db, user):
    attendance_service.clock_in(user, HQ["latitude"], HQ["longitude"], "10.0.0.8", "d", db, now=datetime(2025, 6, 3, 8, 0))
    return attendance_service.clock_out(
        user, HQ["latitude"], HQ["longitude"], "10.0.0.8", "d", db, now=datetime(2025, 6, 3, 19, 0),
    )


def test_team_lead_reviews_direct_report_overtime(client, db, seed_users):
    event = _overtime_event(db, seed_users["employee"])
    lead_headers = auth_headers(client, "lead001")

    pending = client.get("/api/attendance/overtime/pending", headers=lead_headers)
    assert pending.status_code == 200
    assert [e["event_id"] for e in pending.json()] == [event.event_id]

    resp = client.put(
        f"/api/attendance/overtime/{event.event_id}",
        json={"status": "Approved", "admin_comment": "ok"},
        headers=lead_headers,
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["overtime_approval_status"] == "Approved"
    assert resp.json()["approved_overtime_hours"] == 3.0

    again = client.put(
        f"/api/attendance/overtime/{event.event_id}",
        json={"status": "Rejected"},
        headers=lead_headers,
    )
    assert again.status_code == 409


def test_overtime_review_rules(db, seed_users):
    lead = seed_users["lead"]
    own = _overtime_event(db, lead)
    with pytest.raises(Forbidden):
        attendance_service.review_overtime(lead, own.event_id, "Approved", db)

    other = _overtime_event(db, seed_users["other"])
    with pytest.raises(Forbidden):
        attendance_service.review_overtime(lead, other.event_id, "Approved", db)

    rejected = attendance_service.review_overtime(seed_users["hr"], other.event_id, "Rejected", db)
    assert rejected.approved_overtime_hours == 0.0
    with pytest.raises(Conflict):
        attendance_service.review_overtime(seed_users["hr"], other.event_id, "Approved", db)


def test_list_attendance_is_scoped(client, db, seed_users):
    _overtime_event(db, seed_users["employee"])
    _overtime_event(db, seed_users["other"])
    params = {"start": "2025-06-01", "end": "2025-06-30"}

    lead_rows = client.get("/api/attendance", params=params, headers=auth_headers(client, "lead001")).json()
    assert {r["user_id"] for r in lead_rows} == {seed_users["employee"].user_id}

    emp_rows = client.get("/api/attendance", params=params, headers=auth_headers(client, "emp002")).json()
    assert {r["user_id"] for r in emp_rows} == {seed_users["other"].user_id}

    hr_rows = client.get("/api/attendance", params=params, headers=auth_headers(client, "hr001")).json()
    assert len(hr_rows) == 2


def test_employee_cannot_read_someone_elses_summary(client, seed_users):
    resp = client.get(
        f"/api/attendance/{seed_users['employee'].user_id}/summary",
        params={"year": 2025, "month": 6},
        headers=auth_headers(client, "emp002"),
    )
    assert resp.status_code == 403
