"""Permissions 관련 공용 유틸리티 헬퍼입니다.

역할 문자열은 경계에서 한 번만 ``parse_role``로 해석하고, 이후 모든 판단은
``Role`` 열거형으로 수행한다.
"""

from enum import Enum
from typing import Optional

from sqlalchemy.orm import Query

from hrms.models.user import User


class Role(str, Enum):
    ADMIN = "Admin"
    SUB_ADMIN = "Sub-Admin"
    HR = "HR"
    TEAM_LEAD = "Team Lead"
    EMPLOYEE = "Employee"


_ROLE_ALIASES = {
    "admin": Role.ADMIN,
    "sub-admin": Role.SUB_ADMIN,
    "sub_admin": Role.SUB_ADMIN,
    "sub admin": Role.SUB_ADMIN,
    "subadmin": Role.SUB_ADMIN,
    "hr": Role.HR,
    "team lead": Role.TEAM_LEAD,
    "team-lead": Role.TEAM_LEAD,
    "team_lead": Role.TEAM_LEAD,
    "teamlead": Role.TEAM_LEAD,
    "employee": Role.EMPLOYEE,
}

PRIVILEGED_ROLES = (Role.ADMIN, Role.SUB_ADMIN)
ATTENDANCE_MANAGER_ROLES = (Role.ADMIN, Role.HR)
PAYROLL_MANAGER_ROLES = (Role.ADMIN, Role.SUB_ADMIN, Role.HR)
OVERTIME_REVIEWER_ROLES = (Role.ADMIN, Role.SUB_ADMIN, Role.HR, Role.TEAM_LEAD)


def parse_role(value) -> Optional[Role]:
    """Case-insensitive role parsing. Unknown strings return ``None``."""
    if isinstance(value, Role):
        return value
    if value is None:
        return None
    return _ROLE_ALIASES.get(" ".join(str(value).strip().lower().split()))


def role_of(user: User) -> Optional[Role]:
    return parse_role(user.role)


def is_admin(user: User) -> bool:
    return role_of(user) == Role.ADMIN


def has_role(user: User, *roles: Role) -> bool:
    return role_of(user) in roles


def _outranks_hr_scope(target_role: Optional[Role]) -> bool:
    return target_role in PRIVILEGED_ROLES


def can_approve_leave(approver_role, target_role) -> bool:
    approver = parse_role(approver_role)
    target = parse_role(target_role)
    if approver == Role.ADMIN:
        return True
    if approver == Role.HR:
        return not _outranks_hr_scope(target)
    if approver == Role.SUB_ADMIN:
        return target in (Role.EMPLOYEE, Role.TEAM_LEAD)
    return False


def can_view_attendance(viewer: User, target: User) -> bool:
    if viewer.user_id == target.user_id:
        return True
    viewer_role = role_of(viewer)
    if viewer_role in PRIVILEGED_ROLES:
        return True
    if viewer_role == Role.HR:
        return not _outranks_hr_scope(role_of(target))
    if viewer_role == Role.TEAM_LEAD:
        return target.manager_id == viewer.user_id
    return False


def can_view_payroll(viewer: User, target: User) -> bool:
    if viewer.user_id == target.user_id:
        return True
    viewer_role = role_of(viewer)
    target_role = role_of(target)
    if viewer_role == Role.ADMIN:
        return True
    if viewer_role == Role.SUB_ADMIN:
        return target_role != Role.ADMIN
    if viewer_role == Role.HR:
        return not _outranks_hr_scope(target_role)
    return False


def can_manage_payroll(viewer: User, target: User) -> bool:
    if not has_role(viewer, *PAYROLL_MANAGER_ROLES):
        return False
    if viewer.user_id == target.user_id and not is_admin(viewer):
        return False
    return can_view_payroll(viewer, target)


def can_manage_attendance(viewer: User, target: User) -> bool:
    """Overrides are written by Admin, or by HR for non-privileged staff."""
    viewer_role = role_of(viewer)
    if viewer_role == Role.ADMIN:
        return True
    if viewer_role == Role.HR:
        return not _outranks_hr_scope(role_of(target))
    return False


def can_review_overtime(reviewer: User, target: User) -> bool:
    if reviewer.user_id == target.user_id:
        return False
    if not has_role(reviewer, *OVERTIME_REVIEWER_ROLES):
        return False
    return can_view_attendance(reviewer, target)


def can_view_leave_request(viewer: User, owner_id: int, owner_role) -> bool:
    if viewer.user_id == owner_id:
        return True
    return can_approve_leave(viewer.role, owner_role)


def scope_attendance_users(viewer: User, query: Query) -> Query:
    """Restrict a ``User`` query to the people whose attendance ``viewer`` may read."""
    viewer_role = role_of(viewer)
    if viewer_role in PRIVILEGED_ROLES:
        return query
    if viewer_role == Role.HR:
        allowed = [u.user_id for u in query.all() if can_view_attendance(viewer, u)]
        return query.filter(User.user_id.in_(allowed or [-1]))
    if viewer_role == Role.TEAM_LEAD:
        return query.filter((User.user_id == viewer.user_id) | (User.manager_id == viewer.user_id))
    return query.filter(User.user_id == viewer.user_id)


def scope_payroll_users(viewer: User, query: Query) -> Query:
    """Restrict a ``User`` query to the people whose payroll ``viewer`` may read."""
    viewer_role = role_of(viewer)
    if viewer_role == Role.ADMIN:
        return query
    if viewer_role in (Role.SUB_ADMIN, Role.HR):
        allowed = [u.user_id for u in query.all() if can_view_payroll(viewer, u)]
        return query.filter(User.user_id.in_(allowed or [-1]))
    return query.filter(User.user_id == viewer.user_id)
