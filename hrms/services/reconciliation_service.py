"""휴가 승인/삭제를 일자별 출석 인정값에 반영하는 서비스입니다.

반영 내역은 ``leave_day_coverage`` 행으로만 표현되며, 원본 출퇴근 기록은
수정하지 않는다. 같은 승인을 두 번 반영해도 (신청, 일자) 유니크 키 때문에
중복 인정이 생기지 않는다.
"""

import logging
from typing import List

from sqlalchemy.orm import Session

from hrms.models.leave import LeaveDayCoverage, LeaveRequest
from hrms.services.calendar_service import iter_dates

logger = logging.getLogger(__name__)


def apply_leave_coverage(db: Session, request: LeaveRequest) -> List[LeaveDayCoverage]:
    """Stage coverage rows for an approved request. The caller commits."""
    if request.status != "approved" or request.payment_type not in ("paid", "unpaid"):
        return []

    existing = {
        row.work_date: row
        for row in db.query(LeaveDayCoverage)
        .filter(LeaveDayCoverage.leave_request_id == request.request_id)
        .all()
    }
    rows: List[LeaveDayCoverage] = []
    for day in iter_dates(request.start_date, request.end_date):
        row = existing.get(day)
        if row is None:
            row = LeaveDayCoverage(
                leave_request_id=request.request_id,
                user_id=request.user_id,
                work_date=day,
                payment_type=request.payment_type,
            )
            db.add(row)
        else:
            row.payment_type = request.payment_type
        rows.append(row)
    logger.info(
        "[leave] coverage applied request=%s user=%s days=%s type=%s",
        request.request_id, request.user_id, len(rows), request.payment_type,
    )
    return rows


def revert_leave_coverage(db: Session, request: LeaveRequest) -> int:
    """Remove the request's coverage rows so raw attendance shows through again."""
    removed = (
        db.query(LeaveDayCoverage)
        .filter(LeaveDayCoverage.leave_request_id == request.request_id)
        .delete(synchronize_session=False)
    )
    if removed:
        db.expire(request, ["coverage"])
        logger.info("[leave] coverage reverted request=%s days=%s", request.request_id, removed)
    return removed
