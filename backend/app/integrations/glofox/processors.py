"""
Data Processing Logic for Glofox Records.

Maps raw Glofox member, attendance and booking payloads (snake_case, with
field names that vary between tenants) to the shared models.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from app.integrations.base import parse_iso_date, parse_iso_datetime
from app.integrations.glofox.schema import (
    BOOKING_ID_PREFIX,
    CHECKIN_ID_PREFIX,
    MEMBER_ID_PREFIX,
    SOURCE,
    STATUS_MAPPING,
)
from app.models.integration import (
    ExternalMember,
    ExternalMemberStatus,
    ExternalVisit,
    VisitType,
)

logger = logging.getLogger(__name__)


def first_present(record: Dict[str, Any], *keys: str) -> Any:
    """Returns the first non-empty value among several candidate fields."""
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return value
    return None


def external_member_id(native_id: Any) -> str:
    """Builds the external member id for a Glofox member id."""
    return f"{MEMBER_ID_PREFIX}{native_id}"


def split_name(record: Dict[str, Any]) -> Tuple[str, str]:
    """Reads first/last name, falling back to splitting a single `name` field."""
    first = first_present(record, "first_name", "firstName")
    last = first_present(record, "last_name", "lastName")
    if first is None and last is None and record.get("name"):
        parts = str(record["name"]).split(" ", 1)
        first = parts[0]
        last = parts[1] if len(parts) > 1 else ""
    return (first or "").strip(), (last or "").strip()


def map_member_status(raw_status: Any) -> ExternalMemberStatus:
    """Maps a Glofox member status (unknown values count as active)."""
    if not raw_status:
        return ExternalMemberStatus.ACTIVE
    status = STATUS_MAPPING.get(str(raw_status).strip().lower())
    if status is None:
        logger.debug(f"Unknown Glofox status '{raw_status}', treating as active")
        return ExternalMemberStatus.ACTIVE
    return status


def process_glofox_member(record: Dict[str, Any]) -> ExternalMember:
    """
    Maps a Glofox member record.

    Args:
        record: Raw member from GET /members

    Returns:
        ExternalMember with id "GF-<uuid>"
    """
    native_id = first_present(record, "_id", "id")
    if native_id is None:
        raise ValueError("Glofox member without id")

    joined = parse_iso_date(first_present(record, "join_date", "created", "created_at"))
    if joined is None:
        raise ValueError(f"Glofox member {native_id} has no join date")

    first_name, last_name = split_name(record)

    return ExternalMember(
        external_id=external_member_id(native_id),
        first_name=first_name,
        last_name=last_name,
        email=record.get("email") or None,
        phone=record.get("phone") or None,
        joined_date=joined,
        last_visit_date=parse_iso_date(first_present(record, "last_check_in", "last_visit")),
        status=map_member_status(record.get("status")),
        metadata={
            "source": SOURCE,
            "member_uuid": str(native_id),
            "branch_id": record.get("branch_id"),
            "updated_at": parse_iso_datetime(first_present(record, "updated_at", "modified")),
        },
    )


def _visit_type(record: Dict[str, Any], is_booking: bool) -> VisitType:
    if is_booking or record.get("class_id"):
        return VisitType.CLASS
    kind = str(record.get("type") or "").lower()
    if "class" in kind:
        return VisitType.CLASS
    if "appointment" in kind:
        return VisitType.APPOINTMENT
    return VisitType.CHECK_IN


def process_glofox_visit(record: Dict[str, Any]) -> ExternalVisit:
    """
    Maps a Glofox attendance (check-in) or booking record.

    Args:
        record: Raw record from GET /attendances or GET /bookings

    Returns:
        ExternalVisit with id "GF-CHECKIN-<id>" or "GF-BOOKING-<id>"
    """
    member_ref = first_present(record, "member_id", "memberId")
    if member_ref is None:
        raise ValueError("Glofox visit without member reference")

    visit_date = parse_iso_date(first_present(record, "timestamp", "date"))
    if visit_date is None:
        raise ValueError(f"Glofox visit for {member_ref} has no date")

    is_booking = record.get("record_kind") == "booking"
    prefix = BOOKING_ID_PREFIX if is_booking else CHECKIN_ID_PREFIX
    native_id: Optional[Any] = first_present(record, "_id", "id")
    visit_id = native_id if native_id is not None else f"{member_ref}-{visit_date.isoformat()}"

    member_ref = str(member_ref)
    if member_ref.startswith(MEMBER_ID_PREFIX):
        member_external_id = member_ref
    else:
        member_external_id = external_member_id(member_ref)

    return ExternalVisit(
        external_id=f"{prefix}{visit_id}",
        member_external_id=member_external_id,
        visit_date=visit_date,
        visit_type=_visit_type(record, is_booking),
        metadata={
            "source": SOURCE,
            "studio_id": record.get("studio_id") or record.get("branch_id"),
            "class_id": record.get("class_id"),
        },
    )
