"""Payroll 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, Float, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from hrms.database import Base


class PayrollRecord(Base):
    __tablename__ = "payroll"

    payroll_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    present_days = Column(Float, nullable=False, default=0.0)
    total_working_days = Column(Integer, nullable=False, default=0)
    salary_type = Column(String(10), nullable=False)
    salary_amount = Column(Float, nullable=False, default=0.0)
    salary_paid = Column(Float, nullable=False, default=0.0)
    allowances_total = Column(Float, nullable=False, default=0.0)
    deductions_total = Column(Float, nullable=False, default=0.0)
    net_pay = Column(Float, nullable=False, default=0.0)
    status = Column(String(10), nullable=False, default="Unpaid")  # Unpaid/Paid
    pdf_path = Column(String(500), nullable=True)
    generated_at = Column(DateTime, server_default=func.now())
    paid_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="payroll_records")

    __table_args__ = (
        UniqueConstraint("user_id", "month", "year", name="uq_payroll_user_period"),
    )
