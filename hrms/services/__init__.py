"""서비스 레이어 패키지 초기화 모듈입니다."""

from hrms.services import (
    auth_service,
    geofence_service,
    calendar_service,
    attendance_source,
    attendance_service,
    summary_service,
    reconciliation_service,
    leave_service,
    payroll_service,
)
