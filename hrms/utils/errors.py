"""요청 단위 오류 분류 체계입니다.

Every error is an ``HTTPException`` so services can raise it directly and
FastAPI renders it as ``{"detail": ...}`` with the matching status code.
"""

import logging
from contextlib import contextmanager

from fastapi import HTTPException, status
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError

logger = logging.getLogger(__name__)


class ValidationError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class Conflict(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class UpstreamUnavailable(HTTPException):
    def __init__(self, detail: str = "Data store is unavailable"):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


class NoOpenRecord(NotFound):
    def __init__(self, detail: str = "Cannot clock out: no open clock-in record found for today."):
        super().__init__(detail)


class AlreadyProcessed(Conflict):
    def __init__(self, current_status: str):
        super().__init__(f"Leave request has already been {current_status}.")


class NotPending(Conflict):
    def __init__(self, detail: str = "Only pending leave requests can be deleted."):
        super().__init__(detail)


@contextmanager
def upstream_guard(action: str):
    """Translate data-store connectivity failures into ``UpstreamUnavailable``."""
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        logger.error("[store] %s failed: %s", action, exc)
        raise UpstreamUnavailable(f"Data store unavailable while trying to {action}.") from exc
    except DBAPIError as exc:
        if not exc.connection_invalidated:
            raise
        logger.error("[store] %s lost its connection: %s", action, exc)
        raise UpstreamUnavailable(f"Data store unavailable while trying to {action}.") from exc
