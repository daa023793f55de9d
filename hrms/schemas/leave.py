"""휴가 신청 요청/응답 스키마입니다."""

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel


class LeaveRequestCreate(BaseModel):
    leave_type: Literal["monthly", "emergency", "miscellaneous"]
    start_date: date
    end_date: date
    reason: str


class LeaveDecision(BaseModel):
    status: Literal["approved", "rejected"]
    rejection_reason: Optional[str] = None
    payment_type: Optional[Literal["paid", "unpaid"]] = None


class LeaveRequestOut(BaseModel):
    request_id: int
    user_id: int
    user_name: str
    role: str
    leave_type: str
    start_date: date
    end_date: date
    reason: str
    status: str
    payment_type: Optional[str] = None
    rejection_reason: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    requested_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LeaveBucket(BaseModel):
    allocated: int
    used: int
    pending: int
    remaining: int


class LeaveBalanceOut(BaseModel):
    monthly: LeaveBucket
    emergency: LeaveBucket
    miscellaneous: LeaveBucket


class LeaveBalanceResponse(BaseModel):
    user_id: int
    year: int
    month: int
    leave_balance: LeaveBalanceOut
    degraded: bool = False


class LeaveRequestList(BaseModel):
    items: List[LeaveRequestOut]
    degraded: bool = False
