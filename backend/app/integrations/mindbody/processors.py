"""
Data Processing Logic for Mindbody Records.

Maps raw Mindbody client and visit payloads (PascalCase) to the shared
ExternalMember / ExternalVisit models.
"""

import logging
from typing import Any, Dict

from app.integrations.base import parse_iso_date, parse_iso_datetime
from app.integrations.mindbody.schema import (
    MEMBER_ID_PREFIX,
    SOURCE,
    STATUS_MAPPING,
    VISIT_ID_PREFIX,
)
from app.models.integration import (
    ExternalMember,
    ExternalMemberStatus,
    ExternalVisit,
    VisitType,
)

logger = logging.getLogger(__name__)


def external_member_id(client_id: Any) -> str:
    """Builds the external member id for a Mindbody client id."""
    return f"{MEMBER_ID_PREFIX}{client_id}"


def map_client_status(raw_status: Any) -> ExternalMemberStatus:
    """Maps a Mindbody client status string (unknown values count as active)."""
    if not raw_status:
        return ExternalMemberStatus.ACTIVE
    status = STATUS_MAPPING.get(str(raw_status).strip().lower())
    if status is None:
        logger.debug(f"Unknown Mindbody status '{raw_status}', treating as active")
        return ExternalMemberStatus.ACTIVE
    return status


def map_visit_type(record: Dict[str, Any]) -> VisitType:
    """Appointments and classes are reported on the same endpoint as plain visits."""
    if record.get("AppointmentId"):
        return VisitType.APPOINTMENT
    if record.get("ClassId"):
        return VisitType.CLASS
    return VisitType.VISIT


def process_mindbody_client(record: Dict[str, Any]) -> ExternalMember:
    """
    Maps a Mindbody client record.

    Args:
        record: Raw client from GET /client/clients

    Returns:
        ExternalMember with id "MB-<Id>"
    """
    client_id = record["Id"]
    joined = parse_iso_date(record.get("CreationDate"))
    if joined is None:
        raise ValueError(f"Mindbody client {client_id} has no CreationDate")

    return ExternalMember(
        external_id=external_member_id(client_id),
        first_name=(record.get("FirstName") or "").strip(),
        last_name=(record.get("LastName") or "").strip(),
        email=record.get("Email") or None,
        phone=record.get("MobilePhone") or record.get("HomePhone") or None,
        joined_date=joined,
        last_visit_date=parse_iso_date(record.get("LastVisitDate")),
        status=map_client_status(record.get("Status")),
        metadata={
            "source": SOURCE,
            "client_id": client_id,
            "unique_id": record.get("UniqueId"),
            "updated_at": parse_iso_datetime(record.get("LastModifiedDateTime")),
        },
    )


def process_mindbody_visit(record: Dict[str, Any]) -> ExternalVisit:
    """
    Maps a Mindbody client visit record.

    Args:
        record: Raw visit from GET /client/clientvisits

    Returns:
        ExternalVisit with id "MB-VISIT-<Id>"
    """
    client_id = record["ClientId"]
    visit_date = parse_iso_date(record.get("StartDateTime") or record.get("EndDateTime"))
    if visit_date is None:
        raise ValueError(f"Mindbody visit {record.get('Id')} has no StartDateTime")

    visit_id = record.get("Id") or f"{client_id}-{visit_date.isoformat()}"

    return ExternalVisit(
        external_id=f"{VISIT_ID_PREFIX}{visit_id}",
        member_external_id=external_member_id(client_id),
        visit_date=visit_date,
        visit_type=map_visit_type(record),
        metadata={
            "source": SOURCE,
            "location_id": record.get("LocationId"),
            "class_id": record.get("ClassId"),
        },
    )
