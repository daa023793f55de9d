"""FastAPI 애플리케이션 진입점. 미들웨어와 API 라우터를 등록합니다."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hrms.config import settings
from hrms.database import Base, engine
import hrms.models  # noqa: F401 - 모델 import로 metadata 등록
from hrms.routers import (
    auth, attendance, leave_requests, payroll, users, offices, calendar,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = FastAPI(
    title="HRMS 근태/휴가/급여 관리 시스템",
    description="출퇴근 기록, 휴가 승인, 월별 급여 산정을 하나의 근태 원장으로 조정하는 시스템",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register all routers
app.include_router(auth.router)
app.include_router(attendance.router)
app.include_router(leave_requests.router)
app.include_router(payroll.router)
app.include_router(users.router)
app.include_router(offices.router)
app.include_router(calendar.router)


@app.on_event("startup")
def ensure_schema():
    # 신규 기능 배포 시 누락된 테이블을 자동 생성합니다.
    Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "HRMS 근태/휴가/급여 관리 시스템"}
