"""
Mindbody Public API v6 Mapping Configuration.

Endpoints, response keys and status vocabulary used by the Mindbody adapter.
"""

from typing import Dict

from app.models.integration import ExternalMemberStatus

SOURCE = "mindbody"

# External ids are namespaced so they can never collide with other platforms
MEMBER_ID_PREFIX = "MB-"
VISIT_ID_PREFIX = "MB-VISIT-"

PAGE_SIZE = 200

ENDPOINTS: Dict[str, Dict[str, str]] = {
    "clients": {
        "endpoint": "/client/clients",
        "data_key": "Clients",
    },
    "client_visits": {
        "endpoint": "/client/clientvisits",
        "data_key": "Visits",
    },
}

# Mindbody client status strings -> shared lifecycle status
STATUS_MAPPING: Dict[str, ExternalMemberStatus] = {
    "active": ExternalMemberStatus.ACTIVE,
    "inactive": ExternalMemberStatus.INACTIVE,
    "non-member": ExternalMemberStatus.INACTIVE,
    "suspended": ExternalMemberStatus.SUSPENDED,
    "on hold": ExternalMemberStatus.SUSPENDED,
    "terminated": ExternalMemberStatus.CANCELLED,
    "cancelled": ExternalMemberStatus.CANCELLED,
    "expired": ExternalMemberStatus.CANCELLED,
}


def get_endpoint(resource: str) -> str:
    """Returns the API path for a resource."""
    return ENDPOINTS[resource]["endpoint"]


def get_data_key(resource: str) -> str:
    """Returns the response key holding the records of a resource."""
    return ENDPOINTS[resource]["data_key"]
