"""출퇴근 기록, 관리자 보정, 과거 형식 출석 데이터의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, Date, DateTime, Float, String, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from hrms.database import Base


class AttendanceEvent(Base):
    __tablename__ = "attendance_records"

    event_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    work_date = Column(Date, nullable=False)

    clock_in_time = Column(DateTime, nullable=False)
    clock_in_latitude = Column(Float, nullable=False)
    clock_in_longitude = Column(Float, nullable=False)
    clock_in_ip = Column(String(64), nullable=False)
    clock_in_device_id = Column(String(100), nullable=False)
    clock_in_photo_url = Column(String(500), nullable=True)

    clock_out_time = Column(DateTime, nullable=True)
    clock_out_latitude = Column(Float, nullable=True)
    clock_out_longitude = Column(Float, nullable=True)
    clock_out_ip = Column(String(64), nullable=True)
    clock_out_device_id = Column(String(100), nullable=True)

    verification_status = Column(String(20), nullable=False, default="Pending Review")
    verification_details = Column(Text, nullable=True)
    matched_office_id = Column(Integer, ForeignKey("office_locations.office_id"), nullable=True)

    total_hours = Column(Float, nullable=True)
    regular_hours = Column(Float, nullable=True)
    potential_overtime_hours = Column(Float, nullable=True)
    approved_overtime_hours = Column(Float, nullable=False, default=0.0)
    overtime_approval_status = Column(String(10), nullable=False, default="N/A")  # N/A/Pending/Approved/Rejected
    overtime_reason = Column(Text, nullable=True)
    overtime_reviewed_by = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    overtime_reviewed_at = Column(DateTime, nullable=True)
    admin_comment = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", foreign_keys=[user_id], back_populates="attendance_events")

    __table_args__ = (
        UniqueConstraint("user_id", "work_date", name="uq_attendance_user_date"),
    )


class LegacyAttendanceEntry(Base):
    """Imported history with the older, loosely-shaped attendance layout.

    Rows may carry ``uid`` instead of ``user_id`` and may lack ``date``, in
    which case the calendar date is derived from ``created_at``/``check_in``.
    """

    __tablename__ = "attendance"

    entry_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=True)
    uid = Column(String(64), nullable=True)
    date = Column(String(10), nullable=True)  # YYYY-MM-DD
    check_in = Column(DateTime, nullable=True)
    check_out = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=True)
    created_at = Column(DateTime, nullable=True)


class AttendanceOverride(Base):
    __tablename__ = "attendance_overrides"

    override_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    work_date = Column(Date, nullable=False)
    day_credit = Column(Float, nullable=False)
    reason = Column(Text, nullable=True)
    updated_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "work_date", name="uq_attendance_override"),
    )
