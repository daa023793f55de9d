"""사무실 위치(지오펜스)와 회사 휴무일의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Float, JSON
from sqlalchemy.sql import func

from hrms.database import Base


class OfficeLocation(Base):
    __tablename__ = "office_locations"

    office_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    radius_meters = Column(Float, nullable=False, default=100.0)
    whitelisted_ips = Column(JSON, nullable=False, default=list)  # IPs or CIDR ranges
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class CalendarOffDay(Base):
    __tablename__ = "calendar_off_days"

    off_day_id = Column(Integer, primary_key=True, autoincrement=True)
    off_date = Column(Date, nullable=False, unique=True)
    description = Column(String(200), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
