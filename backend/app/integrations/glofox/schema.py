"""
Glofox API Mapping Configuration.

Endpoints, list keys and status vocabulary used by the Glofox adapter.
Glofox tenants differ in which key wraps a list response, so every
resource lists the keys to try in order.
"""

from typing import Any, Dict, List

from app.models.integration import ExternalMemberStatus

SOURCE = "glofox"

MEMBER_ID_PREFIX = "GF-"
CHECKIN_ID_PREFIX = "GF-CHECKIN-"
BOOKING_ID_PREFIX = "GF-BOOKING-"

PAGE_SIZE = 100

ENDPOINTS: Dict[str, Dict[str, Any]] = {
    "members": {
        "endpoint": "/members",
        "list_keys": ["data", "members"],
    },
    "attendances": {
        "endpoint": "/attendances",
        "list_keys": ["data", "attendances"],
    },
    "bookings": {
        "endpoint": "/bookings",
        "list_keys": ["data", "bookings"],
    },
}

STATUS_MAPPING: Dict[str, ExternalMemberStatus] = {
    "active": ExternalMemberStatus.ACTIVE,
    "inactive": ExternalMemberStatus.INACTIVE,
    "lead": ExternalMemberStatus.INACTIVE,
    "cancelled": ExternalMemberStatus.CANCELLED,
    "canceled": ExternalMemberStatus.CANCELLED,
    "paused": ExternalMemberStatus.SUSPENDED,
    "frozen": ExternalMemberStatus.SUSPENDED,
    "suspended": ExternalMemberStatus.SUSPENDED,
}


def get_endpoint(resource: str) -> str:
    """Returns the API path for a resource."""
    return ENDPOINTS[resource]["endpoint"]


def get_list_keys(resource: str) -> List[str]:
    """Returns candidate response keys holding the records of a resource."""
    return ENDPOINTS[resource]["list_keys"]
