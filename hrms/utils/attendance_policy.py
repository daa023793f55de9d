"""출퇴근 시각을 일자별 출근 인정값(day credit)으로 환산하는 정책 모듈입니다."""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from hrms.config import settings

FULL = "Full"
HALF = "Half"
SHORT = "Short"
OPEN = "Open"
ABSENT = "Absent"
PRESENT = "Present"
PAID_LEAVE = "Paid Leave"
UNPAID_LEAVE = "Unpaid Leave"
OVERRIDDEN = "Overridden"


@dataclass(frozen=True)
class DayPolicy:
    standard_hours: float = 8.0
    half_day_min_hours: float = 4.0
    open_shift_credit: float = 0.0
    late_in_hour: int = 11
    early_out_hour: int = 17
    timezone_name: str = "UTC"

    @classmethod
    def from_settings(cls) -> "DayPolicy":
        return cls(
            standard_hours=settings.STANDARD_WORK_HOURS,
            half_day_min_hours=settings.HALF_DAY_MIN_HOURS,
            open_shift_credit=settings.OPEN_SHIFT_DAY_CREDIT,
            late_in_hour=settings.LATE_IN_HOUR,
            early_out_hour=settings.EARLY_OUT_HOUR,
            timezone_name=settings.BUSINESS_TIMEZONE,
        )


def to_business_time(moment: datetime, timezone_name: str) -> datetime:
    """Naive UTC timestamp -> naive wall-clock time in ``timezone_name``."""
    aware = moment.replace(tzinfo=timezone.utc) if moment.tzinfo is None else moment
    return aware.astimezone(ZoneInfo(timezone_name)).replace(tzinfo=None)


def business_date(moment: datetime, timezone_name: Optional[str] = None) -> date:
    return to_business_time(moment, timezone_name or settings.BUSINESS_TIMEZONE).date()


@dataclass
class DailyStatus:
    day_credit: float
    underwork: bool
    overtime_hours: float
    total_hours: float
    status: str


def worked_hours(check_in: Optional[datetime], check_out: Optional[datetime]) -> float:
    if not check_in or not check_out:
        return 0.0
    return max(0.0, (check_out - check_in).total_seconds() / 3600)


def _late_in_or_early_out(check_in: datetime, check_out: datetime, policy: DayPolicy) -> bool:
    local_in = to_business_time(check_in, policy.timezone_name)
    local_out = to_business_time(check_out, policy.timezone_name)
    return local_in.hour >= policy.late_in_hour or local_out.hour < policy.early_out_hour


def compute_daily_status(
    check_in: Optional[datetime],
    check_out: Optional[datetime],
    marked_present: bool = False,
    policy: Optional[DayPolicy] = None,
) -> DailyStatus:
    policy = policy or DayPolicy.from_settings()

    if check_in is None:
        if marked_present:
            return DailyStatus(1.0, False, 0.0, 0.0, PRESENT)
        return DailyStatus(0.0, False, 0.0, 0.0, ABSENT)

    if check_out is None:
        return DailyStatus(policy.open_shift_credit, False, 0.0, 0.0, OPEN)

    hours = worked_hours(check_in, check_out)
    total = round(hours, 2)
    if hours >= policy.standard_hours:
        return DailyStatus(1.0, False, round(hours - policy.standard_hours, 2), total, FULL)
    if hours >= policy.half_day_min_hours or (hours > 0 and _late_in_or_early_out(check_in, check_out, policy)):
        return DailyStatus(0.5, True, 0.0, total, HALF)
    return DailyStatus(0.0, True, 0.0, total, SHORT)


def split_shift_hours(total_hours: float, standard_hours: float) -> tuple[float, float]:
    """Return ``(regular, potential_overtime)`` for a closed shift."""
    regular = min(total_hours, standard_hours)
    overtime = max(0.0, total_hours - standard_hours)
    return round(regular, 2), round(overtime, 2)


def aggregate_monthly(days: Iterable[dict]) -> dict:
    present = 0.0
    full_days = half_days = zero_days = 0
    underwork_alerts = 0
    overtime = 0.0
    for day in days:
        credit = day["day_credit"]
        present += credit
        overtime += day["overtime_hours"]
        if day["underwork"]:
            underwork_alerts += 1
        if credit >= 1:
            full_days += 1
        elif credit >= 0.5:
            half_days += 1
        elif day["status"] != UNPAID_LEAVE:
            zero_days += 1
    return {
        "present_days": round(present, 2),
        "full_days": full_days,
        "half_days": half_days,
        "zero_days": zero_days,
        "underwork_alerts": underwork_alerts,
        "overtime_hours": round(overtime, 2),
    }
