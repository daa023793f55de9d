"""Attendance Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrms.config import settings
from hrms.models.attendance import AttendanceEvent, AttendanceOverride
from hrms.models.user import User
from hrms.services import geofence_service
from hrms.utils.attendance_policy import business_date, split_shift_hours
from hrms.utils.errors import (
    Conflict,
    Forbidden,
    NoOpenRecord,
    NotFound,
    ValidationError,
    upstream_guard,
)
from hrms.utils.permissions import (
    can_manage_attendance,
    can_review_overtime,
    can_view_attendance,
    scope_attendance_users,
)

logger = logging.getLogger(__name__)

OVERTIME_NA = "N/A"
OVERTIME_PENDING = "Pending"
OVERTIME_APPROVED = "Approved"
OVERTIME_REJECTED = "Rejected"

VALID_DAY_CREDITS = (0.0, 0.5, 1.0)


def _utcnow() -> datetime:
    # stored naive in UTC, matching DateTime columns without timezone
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _verify(db: Session, latitude: float, longitude: float, client_ip: str) -> geofence_service.GeofenceResult:
    offices = geofence_service.list_active_offices(db)
    result = geofence_service.verify_location(latitude, longitude, client_ip, offices)
    if result.verification_status != geofence_service.VERIFIED:
        logger.warning(
            "[attendance] verification %s (ip=%s, lat=%s, lon=%s)",
            result.verification_status, client_ip, latitude, longitude,
        )
        if settings.geofence_blocks():
            raise Forbidden(f"Attendance rejected: {result.verification_status}.")
    return result


def _load_user(user_id: int, db: Session) -> User:
    with upstream_guard("read user"):
        target = db.query(User).filter(User.user_id == user_id).first()
    if not target:
        raise NotFound("User not found.")
    return target


def get_event(work_date: date, user_id: int, db: Session) -> Optional[AttendanceEvent]:
    with upstream_guard("read attendance record"):
        return (
            db.query(AttendanceEvent)
            .filter(
                AttendanceEvent.work_date == work_date,
                AttendanceEvent.user_id == user_id,
            )
            .first()
        )


def current_shift(work_date: date, user_id: int, db: Session) -> Optional[AttendanceEvent]:
    """Today's event, or yesterday's when that shift is still open past midnight."""
    event = get_event(work_date, user_id, db)
    if event is not None:
        return event
    previous = get_event(work_date - timedelta(days=1), user_id, db)
    if previous is not None and previous.clock_out_time is None:
        return previous
    return None


def get_my_status(user: User, client_ip: str, latitude: Optional[float], longitude: Optional[float], db: Session, now: Optional[datetime] = None) -> dict:
    current = now or _utcnow()
    work_date = business_date(current)
    event = current_shift(work_date, user.user_id, db)
    verification = None
    if latitude is not None and longitude is not None:
        offices = geofence_service.list_active_offices(db)
        verification = geofence_service.verify_location(latitude, longitude, client_ip, offices).verification_status
    return {
        "user_id": user.user_id,
        "work_date": work_date,
        "verification_status": verification,
        "can_clock_in": event is None or event.work_date != work_date,
        "can_clock_out": event is not None and event.clock_out_time is None,
        "event": event,
    }


def clock_in(
    user: User,
    latitude: float,
    longitude: float,
    client_ip: str,
    device_id: str,
    db: Session,
    photo_url: Optional[str] = None,
    now: Optional[datetime] = None,
) -> AttendanceEvent:
    current = now or _utcnow()
    work_date = business_date(current)
    if get_event(work_date, user.user_id, db):
        raise Conflict("Already clocked in today.")

    result = _verify(db, latitude, longitude, client_ip)
    event = AttendanceEvent(
        user_id=user.user_id,
        work_date=work_date,
        clock_in_time=current,
        clock_in_latitude=latitude,
        clock_in_longitude=longitude,
        clock_in_ip=client_ip,
        clock_in_device_id=device_id,
        clock_in_photo_url=photo_url,
        verification_status=result.verification_status,
        verification_details=" ".join(result.details) or None,
        matched_office_id=result.matched_office_id,
        overtime_approval_status=OVERTIME_NA,
    )
    with upstream_guard("record clock-in"):
        db.add(event)
        try:
            db.commit()
        except IntegrityError:
            # another request inserted the same user/day first
            db.rollback()
            raise Conflict("Already clocked in today.")
        db.refresh(event)
    logger.info("[attendance] clock-in user=%s date=%s status=%s", user.user_id, work_date, event.verification_status)
    return event


def clock_out(
    user: User,
    latitude: float,
    longitude: float,
    client_ip: str,
    device_id: str,
    db: Session,
    overtime_reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> AttendanceEvent:
    current = now or _utcnow()
    event = current_shift(business_date(current), user.user_id, db)
    if not event:
        raise NoOpenRecord()
    if event.clock_out_time is not None:
        raise Conflict("Already clocked out today.")

    result = _verify(db, latitude, longitude, client_ip)
    total_hours = max(0.0, (current - event.clock_in_time).total_seconds() / 3600)
    regular_hours, overtime_hours = split_shift_hours(total_hours, settings.STANDARD_WORK_HOURS)
    values = {
        "clock_out_time": current,
        "clock_out_latitude": latitude,
        "clock_out_longitude": longitude,
        "clock_out_ip": client_ip,
        "clock_out_device_id": device_id,
        "total_hours": round(total_hours, 2),
        "regular_hours": regular_hours,
        "potential_overtime_hours": overtime_hours,
        "overtime_approval_status": OVERTIME_PENDING if overtime_hours > 0 else OVERTIME_NA,
        "overtime_reason": overtime_reason,
    }
    if result.verification_status != geofence_service.VERIFIED and event.verification_status == geofence_service.VERIFIED:
        values["verification_status"] = result.verification_status
        values["verification_details"] = "Clock-out: " + " ".join(result.details)

    with upstream_guard("record clock-out"):
        updated = db.execute(
            update(AttendanceEvent)
            .where(
                AttendanceEvent.event_id == event.event_id,
                AttendanceEvent.clock_out_time.is_(None),
            )
            .values(**values)
        )
        if updated.rowcount != 1:
            db.rollback()
            raise Conflict("Already clocked out today.")
        db.commit()
        db.refresh(event)
    logger.info(
        "[attendance] clock-out user=%s date=%s hours=%.2f overtime=%.2f",
        user.user_id, event.work_date, event.total_hours, event.potential_overtime_hours,
    )
    return event


def list_events(
    viewer: User,
    start: date,
    end: date,
    db: Session,
    user_id: Optional[int] = None,
) -> List[AttendanceEvent]:
    if end < start:
        raise ValidationError("End date must not be before start date.")
    with upstream_guard("list attendance records"):
        users = scope_attendance_users(viewer, db.query(User))
        if user_id is not None:
            users = users.filter(User.user_id == user_id)
        visible_ids = [u.user_id for u in users.all()]
        if not visible_ids:
            return []
        return (
            db.query(AttendanceEvent)
            .filter(
                AttendanceEvent.user_id.in_(visible_ids),
                AttendanceEvent.work_date >= start,
                AttendanceEvent.work_date <= end,
            )
            .order_by(AttendanceEvent.work_date.desc(), AttendanceEvent.clock_in_time.asc())
            .all()
        )


def get_visible_user(viewer: User, user_id: int, db: Session) -> User:
    target = _load_user(user_id, db)
    if not can_view_attendance(viewer, target):
        raise Forbidden("You cannot view this user's attendance.")
    return target


def _get_override(user_id: int, work_date: date, db: Session) -> Optional[AttendanceOverride]:
    with upstream_guard("read attendance override"):
        return (
            db.query(AttendanceOverride)
            .filter(AttendanceOverride.user_id == user_id, AttendanceOverride.work_date == work_date)
            .first()
        )


def set_override(
    actor: User,
    user_id: int,
    work_date: date,
    day_credit: float,
    db: Session,
    reason: Optional[str] = None,
) -> AttendanceOverride:
    if float(day_credit) not in VALID_DAY_CREDITS:
        raise ValidationError("Invalid dayCredit")
    target = _load_user(user_id, db)
    if not can_manage_attendance(actor, target):
        raise Forbidden("Only Admin/HR can override attendance for this user.")

    row = _get_override(user_id, work_date, db)
    if row is None:
        row = AttendanceOverride(user_id=user_id, work_date=work_date, day_credit=day_credit, updated_by=actor.user_id)
        db.add(row)
    row.day_credit = float(day_credit)
    row.reason = reason or None
    row.updated_by = actor.user_id
    with upstream_guard("save attendance override"):
        db.commit()
        db.refresh(row)
    logger.info("[attendance] override user=%s date=%s credit=%s by=%s", user_id, work_date, day_credit, actor.user_id)
    return row


def delete_override(actor: User, user_id: int, work_date: date, db: Session) -> None:
    target = _load_user(user_id, db)
    if not can_manage_attendance(actor, target):
        raise Forbidden("Only Admin/HR can override attendance for this user.")
    row = _get_override(user_id, work_date, db)
    if not row:
        raise NotFound("Override not found.")
    with upstream_guard("delete attendance override"):
        db.delete(row)
        db.commit()


def list_pending_overtime(viewer: User, db: Session) -> List[AttendanceEvent]:
    with upstream_guard("list pending overtime"):
        users = scope_attendance_users(viewer, db.query(User)).all()
        reviewable = [u.user_id for u in users if can_review_overtime(viewer, u)]
        if not reviewable:
            return []
        return (
            db.query(AttendanceEvent)
            .filter(
                AttendanceEvent.user_id.in_(reviewable),
                AttendanceEvent.overtime_approval_status == OVERTIME_PENDING,
            )
            .order_by(AttendanceEvent.work_date.asc())
            .all()
        )


def review_overtime(
    reviewer: User,
    event_id: int,
    status: str,
    db: Session,
    admin_comment: Optional[str] = None,
) -> AttendanceEvent:
    if status not in (OVERTIME_APPROVED, OVERTIME_REJECTED):
        raise ValidationError("Invalid 'status' provided. Must be 'Approved' or 'Rejected'.")
    with upstream_guard("read attendance record"):
        event = db.query(AttendanceEvent).filter(AttendanceEvent.event_id == event_id).first()
        if not event:
            raise NotFound("Record not found.")
        owner = event.user
    if not can_review_overtime(reviewer, owner):
        raise Forbidden("You do not have permission to review this overtime.")
    if event.overtime_approval_status != OVERTIME_PENDING:
        raise Conflict(
            f"This record is already in '{event.overtime_approval_status}' state and cannot be reviewed."
        )

    approved_hours = (event.potential_overtime_hours or 0.0) if status == OVERTIME_APPROVED else 0.0
    with upstream_guard("review overtime"):
        updated = db.execute(
            update(AttendanceEvent)
            .where(
                AttendanceEvent.event_id == event_id,
                AttendanceEvent.overtime_approval_status == OVERTIME_PENDING,
            )
            .values(
                overtime_approval_status=status,
                approved_overtime_hours=approved_hours,
                overtime_reviewed_by=reviewer.user_id,
                overtime_reviewed_at=_utcnow(),
                admin_comment=admin_comment or None,
            )
        )
        if updated.rowcount != 1:
            db.rollback()
            raise Conflict("This record has already been reviewed.")
        db.commit()
        db.refresh(event)
    return event
