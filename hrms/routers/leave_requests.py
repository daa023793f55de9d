"""휴가 신청/승인/삭제 및 잔여 한도 조회 API 라우터입니다."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hrms.database import get_db
from hrms.middleware.auth_middleware import get_current_user
from hrms.models.user import User
from hrms.schemas.leave import (
    LeaveBalanceResponse,
    LeaveDecision,
    LeaveRequestCreate,
    LeaveRequestList,
    LeaveRequestOut,
)
from hrms.services import leave_service
from hrms.utils.errors import Forbidden, NotFound, UpstreamUnavailable, upstream_guard
from hrms.utils.permissions import can_view_leave_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/leave-requests", tags=["leave"])


@router.post("", response_model=LeaveRequestOut, status_code=201)
def submit_leave_request(
    data: LeaveRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return leave_service.submit(current_user, data.leave_type, data.start_date, data.end_date, data.reason, db)


@router.get("", response_model=LeaveRequestList)
def list_leave_requests(
    status: Optional[str] = Query(None),
    user_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        items = leave_service.list_requests(current_user, db, status=status, user_id=user_id)
    except UpstreamUnavailable as exc:
        logger.warning("[leave] list degraded to empty: %s", exc.detail)
        return LeaveRequestList(items=[], degraded=True)
    return LeaveRequestList(items=items)


@router.get("/balance", response_model=LeaveBalanceResponse)
def get_leave_balance(
    user_id: Optional[int] = Query(None),
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    today = date.today()
    target_year = year or today.year
    target_month = month or today.month
    target_id = user_id or current_user.user_id
    if target_id != current_user.user_id:
        with upstream_guard("read user"):
            target = db.query(User).filter(User.user_id == target_id).first()
        if not target:
            raise NotFound("User not found.")
        if not can_view_leave_request(current_user, target.user_id, target.role):
            raise Forbidden("You cannot view this user's leave balance.")

    degraded = False
    try:
        balance = leave_service.get_balance(target_id, target_year, target_month, db)
    except UpstreamUnavailable as exc:
        logger.warning("[leave] balance degraded to default: %s", exc.detail)
        balance = leave_service.default_balance()
        degraded = True
    return LeaveBalanceResponse(
        user_id=target_id,
        year=target_year,
        month=target_month,
        leave_balance=balance,
        degraded=degraded,
    )


@router.get("/{request_id}", response_model=LeaveRequestOut)
def get_leave_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return leave_service.get_request(current_user, request_id, db)


@router.put("/{request_id}", response_model=LeaveRequestOut)
def decide_leave_request(
    request_id: int,
    data: LeaveDecision,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return leave_service.decide(
        current_user,
        request_id,
        data.status,
        db,
        rejection_reason=data.rejection_reason,
        payment_type=data.payment_type,
    )


@router.delete("/{request_id}", status_code=204)
def delete_leave_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    leave_service.delete(current_user, request_id, db)
