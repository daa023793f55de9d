"""Payroll 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class PayrollOut(BaseModel):
    payroll_id: int
    user_id: int
    month: int
    year: int
    present_days: float
    total_working_days: int
    salary_type: str
    salary_amount: float
    salary_paid: float
    allowances_total: float
    deductions_total: float
    net_pay: float
    status: str
    pdf_path: Optional[str] = None
    generated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PayrollGenerateRequest(BaseModel):
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=2100)
    regenerate: bool = False


class PayrollGenerateResponse(BaseModel):
    message: str
    payrolls: List[PayrollOut]


class PayrollStatusUpdate(BaseModel):
    status: Literal["Paid", "Unpaid"]


class PayslipPathUpdate(BaseModel):
    pdf_path: str = Field(min_length=1)
