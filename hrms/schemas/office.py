"""사무실 위치 및 근무일 달력 요청/응답 스키마입니다."""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime


class OfficeLocationCreate(BaseModel):
    name: str = Field(min_length=1)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    radius_meters: float = Field(gt=0)
    whitelisted_ips: List[str] = []
    is_active: bool = True


class OfficeLocationUpdate(BaseModel):
    name: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    radius_meters: Optional[float] = Field(default=None, gt=0)
    whitelisted_ips: Optional[List[str]] = None
    is_active: Optional[bool] = None


class OfficeLocationOut(BaseModel):
    office_id: int
    name: str
    latitude: float
    longitude: float
    radius_meters: float
    whitelisted_ips: List[str]
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class OffDayCreate(BaseModel):
    off_date: date
    description: Optional[str] = None


class OffDayOut(BaseModel):
    off_day_id: int
    off_date: date
    description: Optional[str] = None

    model_config = {"from_attributes": True}


class WorkingDaysOut(BaseModel):
    year: int
    month: int
    total_days: int
    total_working_days: int
    holidays: List[date]
    off_days: List[date]
