"""Geofence Service 도메인 서비스 레이어입니다. 출퇴근 위치와 접속 IP를 사무실 설정과 대조합니다."""

import ipaddress
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from hrms.models.office import OfficeLocation
from hrms.utils.errors import upstream_guard

EARTH_RADIUS_METERS = 6371e3

VERIFIED = "Verified"
LOCATION_MISMATCH = "Location Mismatch"
IP_MISMATCH = "IP Mismatch"
PENDING_REVIEW = "Pending Review"


@dataclass
class GeofenceResult:
    is_location_verified: bool
    is_ip_verified: bool
    verification_status: str
    matched_office_id: Optional[int] = None
    distance_meters: Optional[float] = None
    details: List[str] = field(default_factory=list)


def haversine_distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def ip_whitelisted(client_ip: str, whitelist: Sequence[str]) -> bool:
    """Empty whitelist allows every address. Entries may be single IPs or CIDR ranges."""
    if not whitelist:
        return True
    try:
        addr = ipaddress.ip_address(client_ip)
    except ValueError:
        return False
    for entry in whitelist:
        try:
            if addr in ipaddress.ip_network(str(entry).strip(), strict=False):
                return True
        except ValueError:
            continue
    return False


def list_active_offices(db: Session) -> List[OfficeLocation]:
    with upstream_guard("read office locations"):
        return (
            db.query(OfficeLocation)
            .filter(OfficeLocation.is_active == True)  # noqa: E712
            .order_by(OfficeLocation.office_id.asc())
            .all()
        )


def verify_location(
    latitude: float,
    longitude: float,
    client_ip: str,
    offices: Sequence[OfficeLocation],
) -> GeofenceResult:
    active = [o for o in offices if o.is_active]
    if not active:
        return GeofenceResult(
            is_location_verified=False,
            is_ip_verified=False,
            verification_status=PENDING_REVIEW,
            details=["No active office locations are configured."],
        )

    for office in active:
        distance = haversine_distance_meters(latitude, longitude, office.latitude, office.longitude)
        if distance > office.radius_meters:
            continue
        # first office in range decides the IP check
        ip_ok = ip_whitelisted(client_ip, office.whitelisted_ips or [])
        result = GeofenceResult(
            is_location_verified=True,
            is_ip_verified=ip_ok,
            verification_status=VERIFIED if ip_ok else IP_MISMATCH,
            matched_office_id=office.office_id,
            distance_meters=round(distance, 2),
        )
        if not ip_ok:
            result.details.append(f"IP address {client_ip} is not whitelisted for office '{office.name}'.")
        return result

    return GeofenceResult(
        is_location_verified=False,
        is_ip_verified=False,
        verification_status=LOCATION_MISMATCH,
        details=["Location is outside the allowed radius for all active offices."],
    )
