"""지오펜스 사무실 위치 관리 API 라우터입니다. 관리자만 접근할 수 있습니다."""

import ipaddress
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hrms.database import get_db
from hrms.middleware.auth_middleware import require_roles
from hrms.models.office import OfficeLocation
from hrms.schemas.office import OfficeLocationCreate, OfficeLocationOut, OfficeLocationUpdate
from hrms.utils.errors import NotFound, ValidationError, upstream_guard
from hrms.utils.permissions import Role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/offices", tags=["admin-offices"])


def _validate_whitelist(entries: List[str]) -> List[str]:
    cleaned = []
    for entry in entries:
        value = entry.strip()
        try:
            ipaddress.ip_network(value, strict=False)
        except ValueError:
            raise ValidationError(f"Invalid IP address or CIDR range: '{entry}'")
        cleaned.append(value)
    return cleaned


def _get_office(db: Session, office_id: int) -> OfficeLocation:
    with upstream_guard("read office location"):
        office = db.query(OfficeLocation).filter(OfficeLocation.office_id == office_id).first()
    if not office:
        raise NotFound("Office location not found.")
    return office


@router.get("", response_model=List[OfficeLocationOut])
def list_offices(
    db: Session = Depends(get_db),
    _=Depends(require_roles(Role.ADMIN)),
):
    with upstream_guard("list office locations"):
        return db.query(OfficeLocation).order_by(OfficeLocation.office_id).all()


@router.post("", response_model=OfficeLocationOut, status_code=201)
def create_office(
    data: OfficeLocationCreate,
    db: Session = Depends(get_db),
    _=Depends(require_roles(Role.ADMIN)),
):
    payload = data.model_dump()
    payload["whitelisted_ips"] = _validate_whitelist(data.whitelisted_ips)
    office = OfficeLocation(**payload)
    with upstream_guard("save office location"):
        db.add(office)
        db.commit()
        db.refresh(office)
    logger.info("[geofence] office registered: %s (%s)", office.name, office.office_id)
    return office


@router.put("/{office_id}", response_model=OfficeLocationOut)
def update_office(
    office_id: int,
    data: OfficeLocationUpdate,
    db: Session = Depends(get_db),
    _=Depends(require_roles(Role.ADMIN)),
):
    office = _get_office(db, office_id)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("whitelisted_ips") is not None:
        changes["whitelisted_ips"] = _validate_whitelist(changes["whitelisted_ips"])
    for key, value in changes.items():
        if value is not None:
            setattr(office, key, value)
    with upstream_guard("update office location"):
        db.commit()
        db.refresh(office)
    return office


@router.delete("/{office_id}", status_code=204)
def delete_office(
    office_id: int,
    db: Session = Depends(get_db),
    _=Depends(require_roles(Role.ADMIN)),
):
    office = _get_office(db, office_id)
    with upstream_guard("delete office location"):
        db.delete(office)
        db.commit()
