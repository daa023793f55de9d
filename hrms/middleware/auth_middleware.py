"""JWT 인증 의존성 모듈입니다.

Bearer 토큰을 검증해 활성 사용자를 찾고, 역할(role) 문자열이 알려진
역할로 해석되지 않으면 요청을 거부한다. ``require_roles``는 라우터에서
역할 단위 접근 제어에 사용한다.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from hrms.database import get_db
from hrms.models.user import User
from hrms.config import settings
from hrms.services.auth_service import ALGORITHM
from hrms.utils.errors import upstream_guard
from hrms.utils.permissions import Role, parse_role

security = HTTPBearer()


def decode_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    payload = decode_token(credentials.credentials)
    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    with upstream_guard("authenticate user"):
        user = db.query(User).filter(User.user_id == int(user_id), User.is_active == True).first()  # noqa: E712
    if not user:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    if parse_role(user.role) is None:
        raise HTTPException(status_code=403, detail=f"Unknown role '{user.role}'")
    return user


def require_roles(*roles: Role):
    def checker(current_user: User = Depends(get_current_user)) -> User:
        if parse_role(current_user.role) not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(r.value for r in roles)}",
            )
        return current_user
    return checker
