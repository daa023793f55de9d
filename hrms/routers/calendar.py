"""근무일 계산과 회사 휴무일 관리 API 라우터입니다."""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hrms.database import get_db
from hrms.middleware.auth_middleware import get_current_user, require_roles
from hrms.models.user import User
from hrms.schemas.office import OffDayCreate, OffDayOut, WorkingDaysOut
from hrms.services import calendar_service
from hrms.utils.permissions import ATTENDANCE_MANAGER_ROLES

router = APIRouter(prefix="/api/calendar", tags=["calendar"])


@router.get("/working-days", response_model=WorkingDaysOut)
def get_working_days(
    year: int = Query(...),
    month: int = Query(...),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return calendar_service.compute_working_days(db, year, month)


@router.get("/off-days", response_model=List[OffDayOut])
def list_off_days(
    year: int = Query(...),
    month: int = Query(...),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    calendar_service.validate_period(year, month)
    return calendar_service.list_off_days(db, year, month)


@router.post("/off-days", response_model=OffDayOut, status_code=201)
def create_off_day(
    data: OffDayCreate,
    db: Session = Depends(get_db),
    _=Depends(require_roles(*ATTENDANCE_MANAGER_ROLES)),
):
    return calendar_service.add_off_day(db, data.off_date, data.description)


@router.delete("/off-days/{off_day_id}", status_code=204)
def delete_off_day(
    off_day_id: int,
    db: Session = Depends(get_db),
    _=Depends(require_roles(*ATTENDANCE_MANAGER_ROLES)),
):
    calendar_service.delete_off_day(db, off_day_id)
