"""출퇴근 기록, 월별 요약, 관리자 보정, 초과근무 검토 API 라우터입니다."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from hrms.database import get_db
from hrms.middleware.auth_middleware import get_current_user
from hrms.models.user import User
from hrms.schemas.attendance import (
    AttendanceEventOut,
    ClockInRequest,
    ClockOutRequest,
    MonthlySummaryOut,
    MyAttendanceStatusOut,
    OverrideOut,
    OverrideUpsert,
    OvertimeReview,
)
from hrms.services import attendance_service, summary_service

router = APIRouter(prefix="/api/attendance", tags=["attendance"])


def _get_client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "127.0.0.1"


@router.get("/my-status", response_model=MyAttendanceStatusOut)
def get_my_status(
    request: Request,
    latitude: Optional[float] = Query(None),
    longitude: Optional[float] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return attendance_service.get_my_status(current_user, _get_client_ip(request), latitude, longitude, db)


@router.post("/clock-in", response_model=AttendanceEventOut, status_code=201)
def clock_in(
    data: ClockInRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return attendance_service.clock_in(
        current_user,
        data.latitude,
        data.longitude,
        _get_client_ip(request),
        data.device_id,
        db,
        photo_url=data.photo_url,
    )


@router.post("/clock-out", response_model=AttendanceEventOut)
def clock_out(
    data: ClockOutRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return attendance_service.clock_out(
        current_user,
        data.latitude,
        data.longitude,
        _get_client_ip(request),
        data.device_id,
        db,
        overtime_reason=data.overtime_reason,
    )


@router.get("", response_model=List[AttendanceEventOut])
def list_attendance(
    start: date = Query(...),
    end: date = Query(...),
    user_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return attendance_service.list_events(current_user, start, end, db, user_id=user_id)


@router.get("/overtime/pending", response_model=List[AttendanceEventOut])
def list_pending_overtime(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return attendance_service.list_pending_overtime(current_user, db)


@router.put("/overtime/{event_id}", response_model=AttendanceEventOut)
def review_overtime(
    event_id: int,
    data: OvertimeReview,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return attendance_service.review_overtime(current_user, event_id, data.status, db, data.admin_comment)


@router.get("/{user_id}/summary", response_model=MonthlySummaryOut)
def get_monthly_summary(
    user_id: int,
    year: int = Query(...),
    month: int = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    attendance_service.get_visible_user(current_user, user_id, db)
    return summary_service.summarize(db, user_id, year, month)


@router.put("/override/{user_id}/{work_date}", response_model=OverrideOut)
def upsert_override(
    user_id: int,
    work_date: date,
    data: OverrideUpsert,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return attendance_service.set_override(current_user, user_id, work_date, data.day_credit, db, data.reason)


@router.delete("/override/{user_id}/{work_date}", status_code=204)
def delete_override(
    user_id: int,
    work_date: date,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    attendance_service.delete_override(current_user, user_id, work_date, db)
