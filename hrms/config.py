"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from datetime import date
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./hrms.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    LOG_LEVEL: str = "INFO"

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # Attendance policy
    STANDARD_WORK_HOURS: float = 8.0
    HALF_DAY_MIN_HOURS: float = 4.0
    # shorter shifts still earn a half day when they start late or end early
    LATE_IN_HOUR: int = 11
    EARLY_OUT_HOUR: int = 17
    # clock-in without clock-out earns this credit until the shift is closed
    OPEN_SHIFT_DAY_CREDIT: float = 0.0
    # "flag": record and mark mismatches, "block": reject unverified clock events
    GEOFENCE_POLICY: str = "flag"
    # IANA zone that decides the work date and the late-in/early-out hours
    BUSINESS_TIMEZONE: str = "UTC"

    # Leave policy
    MONTHLY_LEAVE_QUOTA: int = 2
    LEAVE_REASON_MIN_LENGTH: int = 10

    # Calendar (weekday numbers, Monday=0 ... Sunday=6)
    WEEKLY_OFF_DAYS: List[int] = [6]
    EXTRA_HOLIDAYS: List[date] = []

    def geofence_blocks(self) -> bool:
        return str(self.GEOFENCE_POLICY or "").strip().lower() == "block"

    class Config:
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
