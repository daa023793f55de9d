"""Payroll Service 도메인 서비스 레이어입니다.

급여 기록은 최초 조회 시 생성되며, 이후 조회는 저장된 값을 그대로 돌려준다.
재계산은 ``regenerate_payroll``/``generate_payroll_for_month(regenerate=True)``로만
명시적으로 수행한다.
"""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrms.models.payroll import PayrollRecord
from hrms.models.user import User
from hrms.services import calendar_service, summary_service
from hrms.utils.errors import Conflict, Forbidden, NotFound, ValidationError, upstream_guard
from hrms.utils.permissions import (
    Role,
    can_manage_payroll,
    can_view_payroll,
    parse_role,
    scope_payroll_users,
)

logger = logging.getLogger(__name__)

SALARY_TYPES = ("monthly", "daily")
UNPAID = "Unpaid"
PAID = "Paid"
PAYROLL_ROLES = (Role.EMPLOYEE, Role.TEAM_LEAD, Role.HR)


def round_money(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def compute_salary(present_days: float, total_working_days: int, salary_type: str, salary_amount: float) -> float:
    if not salary_amount:
        return 0.0
    if salary_type == "monthly":
        if not total_working_days:
            return 0.0
        return round_money(present_days / total_working_days * salary_amount)
    if salary_type == "daily":
        return round_money(present_days * salary_amount)
    raise ValidationError(f"Unknown salary type: {salary_type}")


def compute_net_pay(salary_paid: float, allowances_total: float = 0.0, deductions_total: float = 0.0) -> float:
    return round_money(salary_paid + (allowances_total or 0.0) - (deductions_total or 0.0))


def _get_user(db: Session, user_id: int) -> User:
    with upstream_guard("read user"):
        user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise NotFound("User not found.")
    return user


def get_stored_payroll(db: Session, user_id: int, month: int, year: int) -> Optional[PayrollRecord]:
    with upstream_guard("read payroll record"):
        return (
            db.query(PayrollRecord)
            .filter(
                PayrollRecord.user_id == user_id,
                PayrollRecord.month == month,
                PayrollRecord.year == year,
            )
            .first()
        )


def _fill_figures(db: Session, record: PayrollRecord, user: User) -> PayrollRecord:
    summary = summary_service.summarize(db, user.user_id, record.year, record.month)
    salary_type = user.salary_type or "monthly"
    salary_amount = float(user.salary_amount or 0.0)
    record.present_days = summary["present_days"]
    record.total_working_days = summary["working_days"]
    record.salary_type = salary_type
    record.salary_amount = salary_amount
    record.salary_paid = compute_salary(record.present_days, record.total_working_days, salary_type, salary_amount)
    record.allowances_total = float(user.allowances_total or 0.0)
    record.deductions_total = float(user.deductions_total or 0.0)
    record.net_pay = compute_net_pay(record.salary_paid, record.allowances_total, record.deductions_total)
    return record


def get_or_create_payroll(db: Session, user_id: int, month: int, year: int) -> PayrollRecord:
    calendar_service.validate_period(year, month)
    stored = get_stored_payroll(db, user_id, month, year)
    if stored:
        return stored

    user = _get_user(db, user_id)
    record = _fill_figures(db, PayrollRecord(user_id=user_id, month=month, year=year, status=UNPAID), user)
    with upstream_guard("create payroll record"):
        db.add(record)
        try:
            db.commit()
        except IntegrityError:
            # created concurrently; the first stored figures win
            db.rollback()
            return get_stored_payroll(db, user_id, month, year)
        db.refresh(record)
    logger.info(
        "[payroll] created user=%s %s-%02d present=%s/%s paid=%.2f",
        user_id, year, month, record.present_days, record.total_working_days, record.salary_paid,
    )
    return record


def regenerate_payroll(db: Session, user_id: int, month: int, year: int) -> PayrollRecord:
    record = get_stored_payroll(db, user_id, month, year)
    if record is None:
        return get_or_create_payroll(db, user_id, month, year)
    if record.status == PAID:
        raise Conflict("Paid payroll records cannot be regenerated.")
    _fill_figures(db, record, _get_user(db, user_id))
    record.pdf_path = None
    record.generated_at = datetime.now(timezone.utc).replace(tzinfo=None)
    with upstream_guard("regenerate payroll record"):
        db.commit()
        db.refresh(record)
    logger.info("[payroll] regenerated user=%s %s-%02d paid=%.2f", user_id, year, month, record.salary_paid)
    return record


def get_payroll_for_viewer(viewer: User, user_id: int, month: int, year: int, db: Session) -> PayrollRecord:
    target = _get_user(db, user_id)
    if not can_view_payroll(viewer, target):
        raise Forbidden("You cannot view this user's payroll.")
    return get_or_create_payroll(db, user_id, month, year)


def _payroll_users(viewer: User, db: Session) -> List[User]:
    with upstream_guard("read payroll users"):
        return (
            scope_payroll_users(viewer, db.query(User).filter(User.is_active == True))  # noqa: E712
            .order_by(User.name.asc())
            .all()
        )


def list_month_payroll(viewer: User, month: int, year: int, db: Session, today: Optional[date] = None) -> List[PayrollRecord]:
    """Month sheet for ``viewer``. Only salaried roles appear; records are created once the month has begun."""
    calendar_service.validate_period(year, month)
    today = today or datetime.now(timezone.utc).date()
    started = date(year, month, 1) <= today
    records = []
    for user in _payroll_users(viewer, db):
        if parse_role(user.role) not in PAYROLL_ROLES:
            continue
        if started:
            records.append(get_or_create_payroll(db, user.user_id, month, year))
            continue
        stored = get_stored_payroll(db, user.user_id, month, year)
        if stored is not None:
            records.append(stored)
    return records


def generate_payroll_for_month(viewer: User, month: int, year: int, db: Session, regenerate: bool = False) -> List[PayrollRecord]:
    calendar_service.validate_period(year, month)
    records = []
    for user in _payroll_users(viewer, db):
        if parse_role(user.role) not in PAYROLL_ROLES or not can_manage_payroll(viewer, user):
            continue
        stored = get_stored_payroll(db, user.user_id, month, year)
        if stored is not None and regenerate and stored.status != PAID:
            records.append(regenerate_payroll(db, user.user_id, month, year))
        else:
            records.append(get_or_create_payroll(db, user.user_id, month, year))
    logger.info("[payroll] generated %s records for %s-%02d by user=%s", len(records), year, month, viewer.user_id)
    return records


def _get_record(db: Session, payroll_id: int) -> PayrollRecord:
    with upstream_guard("read payroll record"):
        record = db.query(PayrollRecord).filter(PayrollRecord.payroll_id == payroll_id).first()
    if not record:
        raise NotFound("Payroll record not found.")
    return record


def regenerate_for_viewer(viewer: User, payroll_id: int, db: Session) -> PayrollRecord:
    record = _get_record(db, payroll_id)
    if not can_manage_payroll(viewer, record.user):
        raise Forbidden("You cannot regenerate this payroll record.")
    return regenerate_payroll(db, record.user_id, record.month, record.year)


def set_status(viewer: User, payroll_id: int, status: str, db: Session) -> PayrollRecord:
    if status not in (UNPAID, PAID):
        raise ValidationError("Status must be 'Paid' or 'Unpaid'.")
    record = _get_record(db, payroll_id)
    if not can_manage_payroll(viewer, record.user):
        raise Forbidden("You cannot update this payroll record.")
    record.status = status
    record.paid_at = datetime.now(timezone.utc).replace(tzinfo=None) if status == PAID else None
    with upstream_guard("update payroll status"):
        db.commit()
        db.refresh(record)
    return record


def set_payslip_path(viewer: User, payroll_id: int, pdf_path: str, db: Session) -> PayrollRecord:
    record = _get_record(db, payroll_id)
    if not can_view_payroll(viewer, record.user):
        raise Forbidden("You cannot access this payslip.")
    record.pdf_path = pdf_path
    with upstream_guard("store payslip path"):
        db.commit()
        db.refresh(record)
    return record


def payroll_history(user_id: int, db: Session) -> List[PayrollRecord]:
    with upstream_guard("read payroll history"):
        return (
            db.query(PayrollRecord)
            .filter(PayrollRecord.user_id == user_id)
            .order_by(PayrollRecord.year.desc(), PayrollRecord.month.desc())
            .all()
        )


def update_salary(
    viewer: User,
    user_id: int,
    salary_type: str,
    salary_amount: float,
    db: Session,
    allowances_total: Optional[float] = None,
    deductions_total: Optional[float] = None,
) -> User:
    if salary_type not in SALARY_TYPES:
        raise ValidationError("Salary type must be 'monthly' or 'daily'.")
    if salary_amount < 0:
        raise ValidationError("Salary amount must not be negative.")
    target = _get_user(db, user_id)
    if not can_manage_payroll(viewer, target):
        raise Forbidden("You cannot change this user's salary.")
    target.salary_type = salary_type
    target.salary_amount = float(salary_amount)
    if allowances_total is not None:
        target.allowances_total = float(allowances_total)
    if deductions_total is not None:
        target.deductions_total = float(deductions_total)
    with upstream_guard("update salary"):
        db.commit()
        db.refresh(target)
    logger.info("[payroll] salary updated user=%s type=%s amount=%.2f by=%s", user_id, salary_type, salary_amount, viewer.user_id)
    return target
