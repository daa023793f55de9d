"""User 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Float, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from hrms.database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    emp_id = Column(String(20), unique=True, nullable=False)
    name = Column(String(50), nullable=False)
    department = Column(String(100))
    role = Column(String(20), nullable=False)  # Admin/Sub-Admin/HR/Team Lead/Employee
    email = Column(String(100))
    manager_id = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    salary_type = Column(String(10), nullable=False, default="monthly")  # monthly/daily
    salary_amount = Column(Float, nullable=False, default=0.0)
    allowances_total = Column(Float, nullable=False, default=0.0)
    deductions_total = Column(Float, nullable=False, default=0.0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())

    manager = relationship("User", remote_side=[user_id], back_populates="direct_reports")
    direct_reports = relationship("User", back_populates="manager")
    attendance_events = relationship(
        "AttendanceEvent",
        back_populates="user",
        foreign_keys="AttendanceEvent.user_id",
    )
    leave_requests = relationship(
        "LeaveRequest",
        back_populates="user",
        foreign_keys="LeaveRequest.user_id",
    )
    payroll_records = relationship("PayrollRecord", back_populates="user")
