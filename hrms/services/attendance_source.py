"""출석 원천 데이터 접근 경계입니다.

현재 형식(``attendance_records``)과 과거 형식(``attendance``) 행을 하나의
``DayRecord`` 형태로 정규화한다. 비즈니스 규칙은 이 모듈 밖에서만 다룬다.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Dict, Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from hrms.models.attendance import AttendanceEvent, AttendanceOverride, LegacyAttendanceEntry
from hrms.models.leave import LeaveDayCoverage


@dataclass
class DayRecord:
    work_date: date
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    marked_present: bool = False

    def merge(self, check_in: Optional[datetime], check_out: Optional[datetime], marked_present: bool) -> None:
        if check_in and (self.check_in is None or check_in < self.check_in):
            self.check_in = check_in
        if check_out and (self.check_out is None or check_out > self.check_out):
            self.check_out = check_out
        self.marked_present = self.marked_present or marked_present


def _parse_date_string(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def legacy_entry_date(entry: LegacyAttendanceEntry) -> Optional[date]:
    """Date string wins; the timestamp-derived date is used only when no string date exists."""
    if entry.date:
        return _parse_date_string(entry.date)
    stamp = entry.created_at or entry.check_in
    return stamp.date() if stamp else None


def _is_marked_present(entry: LegacyAttendanceEntry) -> bool:
    return str(entry.status or "").strip().lower() == "present"


def _legacy_rows(db: Session, user_id: int, start: date, end: date) -> List[LegacyAttendanceEntry]:
    start_at = datetime.combine(start, time.min)
    end_at = datetime.combine(end, time.max)
    owner = or_(LegacyAttendanceEntry.user_id == user_id, LegacyAttendanceEntry.uid == str(user_id))
    by_string = or_(
        LegacyAttendanceEntry.date.between(start.isoformat(), end.isoformat()),
        LegacyAttendanceEntry.date.is_(None),
    )
    rows = db.query(LegacyAttendanceEntry).filter(owner, by_string).all()
    return [
        row for row in rows
        if row.date or (row.created_at and start_at <= row.created_at <= end_at)
        or (row.check_in and start_at <= row.check_in <= end_at)
    ]


def load_day_records(db: Session, user_id: int, start: date, end: date) -> Dict[date, DayRecord]:
    records: Dict[date, DayRecord] = {}

    def _add(work_date: Optional[date], check_in, check_out, marked_present: bool) -> None:
        if work_date is None or work_date < start or work_date > end:
            return
        if not check_in and not marked_present:
            return
        records.setdefault(work_date, DayRecord(work_date)).merge(check_in, check_out, marked_present)

    events = (
        db.query(AttendanceEvent)
        .filter(
            AttendanceEvent.user_id == user_id,
            AttendanceEvent.work_date >= start,
            AttendanceEvent.work_date <= end,
        )
        .all()
    )
    for event in events:
        _add(event.work_date, event.clock_in_time, event.clock_out_time, False)

    for entry in _legacy_rows(db, user_id, start, end):
        _add(legacy_entry_date(entry), entry.check_in, entry.check_out, _is_marked_present(entry))

    return records


def load_overrides(db: Session, user_id: int, start: date, end: date) -> Dict[date, float]:
    rows = (
        db.query(AttendanceOverride)
        .filter(
            AttendanceOverride.user_id == user_id,
            AttendanceOverride.work_date >= start,
            AttendanceOverride.work_date <= end,
        )
        .all()
    )
    return {row.work_date: float(row.day_credit) for row in rows}


def load_leave_coverage(db: Session, user_id: int, start: date, end: date) -> Dict[date, str]:
    """Payment type per covered date; a paid covering wins over an unpaid one."""
    rows = (
        db.query(LeaveDayCoverage)
        .filter(
            LeaveDayCoverage.user_id == user_id,
            LeaveDayCoverage.work_date >= start,
            LeaveDayCoverage.work_date <= end,
        )
        .all()
    )
    coverage: Dict[date, str] = {}
    for row in rows:
        if coverage.get(row.work_date) != "paid":
            coverage[row.work_date] = row.payment_type
    return coverage


def activity_dates(*sources: Iterable[date]) -> List[date]:
    merged = set()
    for source in sources:
        merged.update(source)
    return sorted(merged)
