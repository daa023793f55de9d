"""출퇴근 기록 요청/응답 스키마입니다."""

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ClockInRequest(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    device_id: str = Field(min_length=1)
    photo_url: Optional[str] = None


class ClockOutRequest(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    device_id: str = Field(min_length=1)
    overtime_reason: Optional[str] = None


class AttendanceEventOut(BaseModel):
    event_id: int
    user_id: int
    work_date: date
    clock_in_time: datetime
    clock_in_latitude: float
    clock_in_longitude: float
    clock_in_ip: str
    clock_in_device_id: str
    clock_in_photo_url: Optional[str] = None
    clock_out_time: Optional[datetime] = None
    clock_out_latitude: Optional[float] = None
    clock_out_longitude: Optional[float] = None
    clock_out_ip: Optional[str] = None
    clock_out_device_id: Optional[str] = None
    verification_status: str
    verification_details: Optional[str] = None
    matched_office_id: Optional[int] = None
    total_hours: Optional[float] = None
    regular_hours: Optional[float] = None
    potential_overtime_hours: Optional[float] = None
    approved_overtime_hours: float = 0.0
    overtime_approval_status: str
    overtime_reason: Optional[str] = None
    admin_comment: Optional[str] = None

    model_config = {"from_attributes": True}


class MyAttendanceStatusOut(BaseModel):
    user_id: int
    work_date: date
    verification_status: Optional[str] = None
    can_clock_in: bool
    can_clock_out: bool
    event: Optional[AttendanceEventOut] = None


class OvertimeReview(BaseModel):
    status: Literal["Approved", "Rejected"]
    admin_comment: Optional[str] = None


class OverrideUpsert(BaseModel):
    day_credit: float
    reason: Optional[str] = None


class OverrideOut(BaseModel):
    user_id: int
    work_date: date
    day_credit: float
    reason: Optional[str] = None
    updated_by: int

    model_config = {"from_attributes": True}


class DailyStatusOut(BaseModel):
    work_date: date
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    total_hours: float
    day_credit: float
    underwork: bool
    overtime_hours: float
    status: str
    leave_payment_type: Optional[str] = None
    overridden: bool


class MonthlySummaryOut(BaseModel):
    user_id: int
    year: int
    month: int
    present_days: float
    working_days: int
    attendance_rate: float
    underwork_alerts: int
    overtime_hours: float
    full_days: int
    half_days: int
    zero_days: int
    paid_leave_days: int
    unpaid_leave_days: int
    overridden_days: int
    days: List[DailyStatusOut]
