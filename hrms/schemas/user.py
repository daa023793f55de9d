"""User 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import datetime


class LoginRequest(BaseModel):
    emp_id: str


class UserOut(BaseModel):
    user_id: int
    emp_id: str
    name: str
    department: Optional[str] = None
    role: str
    email: Optional[str] = None
    manager_id: Optional[int] = None
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class SalaryUpdate(BaseModel):
    salary_type: Literal["monthly", "daily"]
    salary_amount: float = Field(ge=0)
    allowances_total: Optional[float] = Field(default=None, ge=0)
    deductions_total: Optional[float] = Field(default=None, ge=0)


class SalaryOut(BaseModel):
    user_id: int
    salary_type: str
    salary_amount: float
    allowances_total: float
    deductions_total: float

    model_config = {"from_attributes": True}
