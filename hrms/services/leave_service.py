"""Leave Service 도메인 서비스 레이어입니다. 휴가 신청, 승인/반려, 삭제와 월별 잔여 한도를 관리합니다."""

import logging
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from hrms.config import settings
from hrms.models.leave import LeaveRequest
from hrms.models.user import User
from hrms.services import reconciliation_service
from hrms.services.calendar_service import iter_dates, month_bounds, validate_period
from hrms.utils.errors import (
    AlreadyProcessed,
    Forbidden,
    NotFound,
    NotPending,
    ValidationError,
    upstream_guard,
)
from hrms.utils.permissions import Role, can_approve_leave, can_view_leave_request, has_role

logger = logging.getLogger(__name__)

LEAVE_TYPES = ("monthly", "emergency", "miscellaneous")
PAYMENT_TYPES = ("paid", "unpaid")
PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"

UNLIMITED = -1


def days_in_month(start_date: date, end_date: date, year: int, month: int) -> int:
    first, last = month_bounds(year, month)
    lo = max(start_date, first)
    hi = min(end_date, last)
    return max(0, (hi - lo).days + 1)


def _months_touched(start_date: date, end_date: date) -> List[tuple]:
    months = []
    for day in iter_dates(start_date, end_date):
        key = (day.year, day.month)
        if key not in months:
            months.append(key)
    return months


def _requests_overlapping_month(db: Session, user_id: int, year: int, month: int) -> List[LeaveRequest]:
    first, last = month_bounds(year, month)
    with upstream_guard("read leave requests"):
        return (
            db.query(LeaveRequest)
            .filter(
                LeaveRequest.user_id == user_id,
                LeaveRequest.start_date <= last,
                LeaveRequest.end_date >= first,
            )
            .all()
        )


def approved_monthly_days(db: Session, user_id: int, year: int, month: int, exclude_request_id: Optional[int] = None) -> int:
    return sum(
        days_in_month(r.start_date, r.end_date, year, month)
        for r in _requests_overlapping_month(db, user_id, year, month)
        if r.leave_type == "monthly" and r.status == APPROVED and r.request_id != exclude_request_id
    )


def _check_monthly_quota(db: Session, user_id: int, start_date: date, end_date: date, exclude_request_id: Optional[int] = None) -> None:
    # only approved requests count against the quota; pending ones do not
    for year, month in _months_touched(start_date, end_date):
        requested = days_in_month(start_date, end_date, year, month)
        used = approved_monthly_days(db, user_id, year, month, exclude_request_id)
        if requested + used > settings.MONTHLY_LEAVE_QUOTA:
            raise ValidationError(
                f"Monthly leave limit exceeded: {used} of {settings.MONTHLY_LEAVE_QUOTA} days already approved "
                f"for {year}-{month:02d}, {requested} more requested."
            )


def submit(
    user: User,
    leave_type: str,
    start_date: date,
    end_date: date,
    reason: str,
    db: Session,
    today: Optional[date] = None,
) -> LeaveRequest:
    today = today or date.today()
    if leave_type not in LEAVE_TYPES:
        raise ValidationError("Invalid leave type")
    if start_date < today:
        raise ValidationError("Start date cannot be in the past")
    if end_date < start_date:
        raise ValidationError("End date must be after start date")
    clean_reason = (reason or "").strip()
    if len(clean_reason) < settings.LEAVE_REASON_MIN_LENGTH:
        raise ValidationError(f"Reason must be at least {settings.LEAVE_REASON_MIN_LENGTH} characters long")
    if leave_type == "monthly":
        _check_monthly_quota(db, user.user_id, start_date, end_date)

    request = LeaveRequest(
        user_id=user.user_id,
        user_name=user.name,
        role=user.role,
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        reason=clean_reason,
        status=PENDING,
    )
    with upstream_guard("submit leave request"):
        db.add(request)
        db.commit()
        db.refresh(request)
    logger.info(
        "[leave] submitted request=%s user=%s type=%s %s..%s",
        request.request_id, user.user_id, leave_type, start_date, end_date,
    )
    return request


def _load_request(request_id: int, db: Session) -> LeaveRequest:
    with upstream_guard("read leave request"):
        request = db.query(LeaveRequest).filter(LeaveRequest.request_id == request_id).first()
    if not request:
        raise NotFound("Leave request not found.")
    return request


def get_request(viewer: User, request_id: int, db: Session) -> LeaveRequest:
    request = _load_request(request_id, db)
    if not can_view_leave_request(viewer, request.user_id, request.role):
        raise Forbidden("You cannot view this leave request.")
    return request


def decide(
    approver: User,
    request_id: int,
    status: str,
    db: Session,
    rejection_reason: Optional[str] = None,
    payment_type: Optional[str] = None,
) -> LeaveRequest:
    request = _load_request(request_id, db)
    if not can_approve_leave(approver.role, request.role):
        raise Forbidden(f"{approver.role} cannot decide leave requests of {request.role}.")
    if request.status != PENDING:
        raise AlreadyProcessed(request.status)

    if status not in (APPROVED, REJECTED):
        raise ValidationError('Status must be either "approved" or "rejected"')
    values = {"status": status, "approved_by": approver.user_id, "approved_at": datetime.now(timezone.utc).replace(tzinfo=None)}
    if status == REJECTED:
        if not rejection_reason or not rejection_reason.strip():
            raise ValidationError("Rejection reason is required for rejected requests")
        values["rejection_reason"] = rejection_reason.strip()
        values["payment_type"] = None
    else:
        if payment_type not in PAYMENT_TYPES:
            raise ValidationError('Payment type must be either "paid" or "unpaid"')
        if request.leave_type == "monthly":
            _check_monthly_quota(db, request.user_id, request.start_date, request.end_date, request.request_id)
        values["payment_type"] = payment_type

    with upstream_guard("decide leave request"):
        updated = db.execute(
            update(LeaveRequest)
            .where(LeaveRequest.request_id == request_id, LeaveRequest.status == PENDING)
            .values(**values)
        )
        if updated.rowcount != 1:
            db.rollback()
            db.refresh(request)
            raise AlreadyProcessed(request.status)
        db.refresh(request)
        if status == APPROVED:
            reconciliation_service.apply_leave_coverage(db, request)
        db.commit()
        db.refresh(request)
    logger.info("[leave] request=%s %s by user=%s", request_id, status, approver.user_id)
    return request


def delete(actor: User, request_id: int, db: Session) -> None:
    request = _load_request(request_id, db)

    is_owner = request.user_id == actor.user_id
    is_manager = has_role(actor, Role.ADMIN, Role.HR) and can_approve_leave(actor.role, request.role)
    if not is_manager:
        if not is_owner:
            raise Forbidden("You cannot delete this leave request.")
        if request.status != PENDING:
            raise NotPending()

    previous_status = request.status
    with upstream_guard("delete leave request"):
        if previous_status == APPROVED:
            reconciliation_service.revert_leave_coverage(db, request)
        db.delete(request)
        db.commit()
    logger.info("[leave] request=%s (%s) deleted by user=%s", request_id, previous_status, actor.user_id)


def list_requests(
    viewer: User,
    db: Session,
    status: Optional[str] = None,
    user_id: Optional[int] = None,
) -> List[LeaveRequest]:
    query = db.query(LeaveRequest)
    if status:
        query = query.filter(LeaveRequest.status == status)
    if user_id is not None:
        query = query.filter(LeaveRequest.user_id == user_id)
    with upstream_guard("list leave requests"):
        rows = query.order_by(LeaveRequest.requested_at.desc(), LeaveRequest.request_id.desc()).all()
    return [r for r in rows if can_view_leave_request(viewer, r.user_id, r.role)]


def default_balance() -> Dict[str, dict]:
    quota = settings.MONTHLY_LEAVE_QUOTA
    return {
        "monthly": {"allocated": quota, "used": 0, "pending": 0, "remaining": quota},
        "emergency": {"allocated": UNLIMITED, "used": 0, "pending": 0, "remaining": UNLIMITED},
        "miscellaneous": {"allocated": UNLIMITED, "used": 0, "pending": 0, "remaining": UNLIMITED},
    }


def get_balance(user_id: int, year: int, month: int, db: Session) -> Dict[str, dict]:
    validate_period(year, month)
    balance = default_balance()
    for r in _requests_overlapping_month(db, user_id, year, month):
        if r.leave_type not in balance:
            continue
        days = days_in_month(r.start_date, r.end_date, year, month)
        if r.status == APPROVED:
            balance[r.leave_type]["used"] += days
        elif r.status == PENDING:
            balance[r.leave_type]["pending"] += days
    monthly = balance["monthly"]
    monthly["remaining"] = max(0, monthly["allocated"] - monthly["used"])
    return balance
