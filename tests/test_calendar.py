"""월별 근무일 계산과 회사 휴무일 관리 테스트입니다."""

from datetime import date

import pytest

from hrms.config import settings
from hrms.services.calendar_service import (
    compute_working_days,
    configured_holidays,
    count_working_days,
)
from hrms.utils.errors import ValidationError
from tests.conftest import auth_headers


def test_october_2025_excludes_sundays_and_holidays():
    holidays = configured_holidays(2025, 10)
    assert date(2025, 10, 20) in holidays
    # 31 days, 4 Sundays, 4 weekday holidays
    assert count_working_days(2025, 10, holidays, [6]) == 23


@pytest.mark.parametrize("year, month", [(2024, 2), (2025, 1), (2025, 6), (2025, 12), (2026, 3)])
def test_working_days_never_exceed_calendar_days(db, year, month):
    result = compute_working_days(db, year, month)
    assert 0 <= result["total_working_days"] <= result["total_days"]


def test_june_2025_has_25_working_days(db):
    assert compute_working_days(db, 2025, 6)["total_working_days"] == 25


def test_extra_holidays_from_settings(db, monkeypatch):
    monkeypatch.setattr(settings, "EXTRA_HOLIDAYS", [date(2025, 6, 10)])
    result = compute_working_days(db, 2025, 6)
    assert result["total_working_days"] == 24
    assert date(2025, 6, 10) in result["holidays"]


def test_invalid_period_is_rejected(db):
    with pytest.raises(ValidationError):
        compute_working_days(db, 2025, 13)


def test_off_day_reduces_working_days(client, seed_users):
    hr_headers = auth_headers(client, "hr001")
    create_resp = client.post(
        "/api/calendar/off-days",
        json={"off_date": "2025-06-13", "description": "Office maintenance"},
        headers=hr_headers,
    )
    assert create_resp.status_code == 201, create_resp.text

    resp = client.get("/api/calendar/working-days", params={"year": 2025, "month": 6}, headers=hr_headers)
    assert resp.status_code == 200, resp.text
    assert resp.json()["total_working_days"] == 24
    assert resp.json()["off_days"] == ["2025-06-13"]

    dup_resp = client.post(
        "/api/calendar/off-days",
        json={"off_date": "2025-06-13"},
        headers=hr_headers,
    )
    assert dup_resp.status_code == 409

    off_day_id = create_resp.json()["off_day_id"]
    del_resp = client.delete(f"/api/calendar/off-days/{off_day_id}", headers=hr_headers)
    assert del_resp.status_code == 204
    resp = client.get("/api/calendar/working-days", params={"year": 2025, "month": 6}, headers=hr_headers)
    assert resp.json()["total_working_days"] == 25


def test_employee_cannot_manage_off_days(client, seed_users):
    resp = client.post(
        "/api/calendar/off-days",
        json={"off_date": "2025-06-13"},
        headers=auth_headers(client, "emp001"),
    )
    assert resp.status_code == 403


def test_working_days_bad_month_via_api(client, seed_users):
    resp = client.get(
        "/api/calendar/working-days",
        params={"year": 2025, "month": 0},
        headers=auth_headers(client, "emp001"),
    )
    assert resp.status_code == 400
