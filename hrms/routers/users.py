from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hrms.database import get_db
from hrms.middleware.auth_middleware import require_roles
from hrms.models.user import User
from hrms.schemas.user import SalaryOut, SalaryUpdate
from hrms.services import payroll_service
from hrms.utils.permissions import PAYROLL_MANAGER_ROLES

router = APIRouter(prefix="/api/users", tags=["users"])


@router.patch("/{user_id}/salary", response_model=SalaryOut)
def update_salary(
    user_id: int,
    data: SalaryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*PAYROLL_MANAGER_ROLES)),
):
    return payroll_service.update_salary(
        current_user,
        user_id,
        data.salary_type,
        data.salary_amount,
        db,
        allowances_total=data.allowances_total,
        deductions_total=data.deductions_total,
    )
