"""Auth Service 도메인 서비스 레이어입니다. 토큰 발급과 사번 기반 로그인을 담당합니다."""

from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, status
from jose import jwt
from sqlalchemy.orm import Session

from hrms.config import settings
from hrms.models.user import User
from hrms.utils.errors import upstream_guard
from hrms.utils.permissions import parse_role

ALGORITHM = "HS256"


def create_access_token(user_id: int) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def mock_sso_login(db: Session, emp_id: str) -> User:
    with upstream_guard("read user"):
        user = db.query(User).filter(User.emp_id == emp_id, User.is_active == True).first()  # noqa: E712
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"No active user found for employee id '{emp_id}'.",
        )
    if parse_role(user.role) is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Unknown role '{user.role}'.",
        )
    return user
