"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from hrms.models.user import User
from hrms.models.office import OfficeLocation, CalendarOffDay
from hrms.models.attendance import AttendanceEvent, LegacyAttendanceEntry, AttendanceOverride
from hrms.models.leave import LeaveRequest, LeaveDayCoverage
from hrms.models.payroll import PayrollRecord

__all__ = [
    "User",
    "OfficeLocation", "CalendarOffDay",
    "AttendanceEvent", "LegacyAttendanceEntry", "AttendanceOverride",
    "LeaveRequest", "LeaveDayCoverage",
    "PayrollRecord",
]
