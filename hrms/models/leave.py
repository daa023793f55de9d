"""휴가 신청과 휴가-출석 반영 내역의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, Date, DateTime, String, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from hrms.database import Base


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    request_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    user_name = Column(String(50), nullable=False)
    role = Column(String(20), nullable=False)
    leave_type = Column(String(20), nullable=False)  # monthly/emergency/miscellaneous
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(String(10), nullable=False, default="pending")  # pending/approved/rejected
    payment_type = Column(String(10), nullable=True)  # paid/unpaid
    rejection_reason = Column(Text, nullable=True)
    approved_by = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    requested_at = Column(DateTime, server_default=func.now())

    user = relationship("User", foreign_keys=[user_id], back_populates="leave_requests")
    coverage = relationship("LeaveDayCoverage", back_populates="leave_request", cascade="all, delete-orphan")


class LeaveDayCoverage(Base):
    __tablename__ = "leave_day_coverage"

    coverage_id = Column(Integer, primary_key=True, autoincrement=True)
    leave_request_id = Column(Integer, ForeignKey("leave_requests.request_id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    work_date = Column(Date, nullable=False)
    payment_type = Column(String(10), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    leave_request = relationship("LeaveRequest", back_populates="coverage")

    __table_args__ = (
        UniqueConstraint("leave_request_id", "work_date", name="uq_leave_coverage_request_date"),
    )
