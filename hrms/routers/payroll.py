"""Payroll 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hrms.database import get_db
from hrms.middleware.auth_middleware import get_current_user, require_roles
from hrms.models.user import User
from hrms.schemas.payroll import (
    PayrollGenerateRequest,
    PayrollGenerateResponse,
    PayrollOut,
    PayrollStatusUpdate,
    PayslipPathUpdate,
)
from hrms.services import payroll_service
from hrms.utils.permissions import PAYROLL_MANAGER_ROLES

router = APIRouter(prefix="/api/payroll", tags=["payroll"])


@router.get("/me/history", response_model=List[PayrollOut])
def my_payroll_history(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return payroll_service.payroll_history(current_user.user_id, db)


@router.get("/me/{year}/{month}", response_model=PayrollOut)
def my_payroll(
    year: int,
    month: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return payroll_service.get_or_create_payroll(db, current_user.user_id, month, year)


@router.get("/users/{user_id}/{year}/{month}", response_model=PayrollOut)
def user_payroll(
    user_id: int,
    year: int,
    month: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return payroll_service.get_payroll_for_viewer(current_user, user_id, month, year, db)


@router.get("/{year}/{month}", response_model=List[PayrollOut])
def month_payroll(
    year: int,
    month: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return payroll_service.list_month_payroll(current_user, month, year, db)


@router.post("/generate", response_model=PayrollGenerateResponse)
def generate_payroll(
    data: PayrollGenerateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*PAYROLL_MANAGER_ROLES)),
):
    records = payroll_service.generate_payroll_for_month(current_user, data.month, data.year, db, data.regenerate)
    return PayrollGenerateResponse(
        message=f"Payroll generated for {len(records)} employees",
        payrolls=records,
    )


@router.post("/{payroll_id}/regenerate", response_model=PayrollOut)
def regenerate_payroll(
    payroll_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*PAYROLL_MANAGER_ROLES)),
):
    return payroll_service.regenerate_for_viewer(current_user, payroll_id, db)


@router.patch("/{payroll_id}/status", response_model=PayrollOut)
def update_payroll_status(
    payroll_id: int,
    data: PayrollStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*PAYROLL_MANAGER_ROLES)),
):
    return payroll_service.set_status(current_user, payroll_id, data.status, db)


@router.patch("/{payroll_id}/payslip", response_model=PayrollOut)
def attach_payslip(
    payroll_id: int,
    data: PayslipPathUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*PAYROLL_MANAGER_ROLES)),
):
    return payroll_service.set_payslip_path(current_user, payroll_id, data.pdf_path, db)
