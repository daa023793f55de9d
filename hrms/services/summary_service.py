"""월별 출석 요약 서비스입니다. 일자별 인정값에 휴가 반영과 관리자 보정을 적용해 집계합니다."""

from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from hrms.services import attendance_source, calendar_service
from hrms.utils.attendance_policy import (
    OVERRIDDEN,
    PAID_LEAVE,
    UNPAID_LEAVE,
    DayPolicy,
    DailyStatus,
    aggregate_monthly,
    compute_daily_status,
)
from hrms.utils.errors import upstream_guard


def _resolve_day(
    work_date: date,
    record: Optional[attendance_source.DayRecord],
    leave_payment: Optional[str],
    override_credit: Optional[float],
    policy: DayPolicy,
) -> dict:
    if record is not None:
        status = compute_daily_status(record.check_in, record.check_out, record.marked_present, policy)
    else:
        status = compute_daily_status(None, None, policy=policy)

    if leave_payment == "paid":
        status = DailyStatus(1.0, False, status.overtime_hours, status.total_hours, PAID_LEAVE)
    elif leave_payment == "unpaid":
        status = DailyStatus(0.0, False, status.overtime_hours, status.total_hours, UNPAID_LEAVE)

    if override_credit is not None:
        status = DailyStatus(
            override_credit,
            status.underwork and override_credit < 1,
            status.overtime_hours,
            status.total_hours,
            OVERRIDDEN,
        )

    return {
        "work_date": work_date,
        "check_in": record.check_in if record else None,
        "check_out": record.check_out if record else None,
        "total_hours": status.total_hours,
        "day_credit": status.day_credit,
        "underwork": status.underwork,
        "overtime_hours": status.overtime_hours,
        "status": status.status,
        "leave_payment_type": leave_payment,
        "overridden": override_credit is not None,
    }


def daily_breakdown(db: Session, user_id: int, year: int, month: int, policy: Optional[DayPolicy] = None) -> List[dict]:
    policy = policy or DayPolicy.from_settings()
    start, end = calendar_service.month_bounds(year, month)
    with upstream_guard("load attendance records"):
        records = attendance_source.load_day_records(db, user_id, start, end)
        coverage = attendance_source.load_leave_coverage(db, user_id, start, end)
        overrides = attendance_source.load_overrides(db, user_id, start, end)
    return [
        _resolve_day(day, records.get(day), coverage.get(day), overrides.get(day), policy)
        for day in attendance_source.activity_dates(records, coverage, overrides)
    ]


def summarize(db: Session, user_id: int, year: int, month: int) -> Dict:
    calendar_service.validate_period(year, month)
    days = daily_breakdown(db, user_id, year, month)
    totals = aggregate_monthly(days)
    working_days = calendar_service.compute_working_days(db, year, month)["total_working_days"]
    rate = round(totals["present_days"] / working_days * 100, 2) if working_days else 0.0
    return {
        "user_id": user_id,
        "year": year,
        "month": month,
        "working_days": working_days,
        "attendance_rate": rate,
        "paid_leave_days": sum(1 for d in days if d["leave_payment_type"] == "paid"),
        "unpaid_leave_days": sum(1 for d in days if d["leave_payment_type"] == "unpaid"),
        "overridden_days": sum(1 for d in days if d["overridden"]),
        "days": days,
        **totals,
    }
