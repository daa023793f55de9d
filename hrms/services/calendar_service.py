"""Calendar Service 도메인 서비스 레이어입니다. 월별 근무일 계산과 회사 휴무일 관리를 담당합니다."""

import calendar
import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from hrms.config import settings
from hrms.models.office import CalendarOffDay
from hrms.utils.errors import Conflict, NotFound, ValidationError, upstream_guard
from hrms.utils.holidays import holidays_for_month

logger = logging.getLogger(__name__)


def validate_period(year: int, month: int) -> None:
    if month < 1 or month > 12:
        raise ValidationError("Invalid month")
    if year < 2000 or year > 2100:
        raise ValidationError("Invalid year")


def month_dates(year: int, month: int) -> List[date]:
    days_in_month = calendar.monthrange(year, month)[1]
    return [date(year, month, d) for d in range(1, days_in_month + 1)]


def month_bounds(year: int, month: int) -> tuple[date, date]:
    days = month_dates(year, month)
    return days[0], days[-1]


def iter_dates(start: date, end: date) -> Iterable[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def count_working_days(
    year: int,
    month: int,
    holidays: Iterable[date] = (),
    weekly_off_days: Iterable[int] = (),
    off_days: Iterable[date] = (),
) -> int:
    excluded = set(holidays) | set(off_days)
    weekly = set(weekly_off_days)
    return sum(
        1
        for day in month_dates(year, month)
        if day not in excluded and day.weekday() not in weekly
    )


def configured_holidays(year: int, month: int) -> List[date]:
    static = [h.date for h in holidays_for_month(year, month)]
    extra = [d for d in settings.EXTRA_HOLIDAYS if d.year == year and d.month == month]
    return sorted(set(static) | set(extra))


def list_off_days(db: Session, year: int, month: int) -> List[CalendarOffDay]:
    start, end = month_bounds(year, month)
    with upstream_guard("read calendar off days"):
        return (
            db.query(CalendarOffDay)
            .filter(CalendarOffDay.off_date >= start, CalendarOffDay.off_date <= end)
            .order_by(CalendarOffDay.off_date.asc())
            .all()
        )


def compute_working_days(db: Session, year: int, month: int) -> dict:
    validate_period(year, month)
    holidays = configured_holidays(year, month)
    off_days = [row.off_date for row in list_off_days(db, year, month)]
    total = count_working_days(year, month, holidays, settings.WEEKLY_OFF_DAYS, off_days)
    return {
        "year": year,
        "month": month,
        "total_days": calendar.monthrange(year, month)[1],
        "total_working_days": total,
        "holidays": holidays,
        "off_days": off_days,
    }


def add_off_day(db: Session, off_date: date, description: Optional[str]) -> CalendarOffDay:
    with upstream_guard("read calendar off days"):
        existing = db.query(CalendarOffDay).filter(CalendarOffDay.off_date == off_date).first()
    if existing:
        raise Conflict("Off day is already registered.")
    row = CalendarOffDay(off_date=off_date, description=description)
    with upstream_guard("save calendar off day"):
        db.add(row)
        db.commit()
        db.refresh(row)
    logger.info("[calendar] off day registered: %s", off_date)
    return row


def delete_off_day(db: Session, off_day_id: int) -> None:
    with upstream_guard("read calendar off days"):
        row = db.query(CalendarOffDay).filter(CalendarOffDay.off_day_id == off_day_id).first()
    if not row:
        raise NotFound("Off day not found.")
    with upstream_guard("delete calendar off day"):
        db.delete(row)
        db.commit()
