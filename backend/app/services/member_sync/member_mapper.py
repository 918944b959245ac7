"""
External -> internal field mapping for member and visit sync.
"""

from typing import Any, Dict

from app.models.integration import ExternalMember, ExternalMemberStatus, VisitType
from app.models.member import ActivityType, ChurnRiskLevel, MemberStatus


def map_member_status(status: ExternalMemberStatus) -> MemberStatus:
    """
    Maps the external lifecycle status to the internal one.

    cancelled -> cancelled; inactive/suspended -> inactive; everything else -> active.
    """
    if status == ExternalMemberStatus.CANCELLED:
        return MemberStatus.CANCELLED
    if status in (ExternalMemberStatus.INACTIVE, ExternalMemberStatus.SUSPENDED):
        return MemberStatus.INACTIVE
    return MemberStatus.ACTIVE


def normalize_visit_type(visit_type: VisitType) -> ActivityType:
    """Check-ins are kept apart; every other visit kind is stored as a plain visit."""
    if visit_type == VisitType.CHECK_IN:
        return ActivityType.CHECK_IN
    return ActivityType.VISIT


def map_external_member(member: ExternalMember, gym_id: str) -> Dict[str, Any]:
    """
    Builds the member row fields written on create and on every update.

    Risk fields are reset here; they are recomputed after visits are synced.
    """
    return {
        "gym_id": gym_id,
        "first_name": member.first_name,
        "last_name": member.last_name,
        "email": member.email or None,
        "phone": member.phone or None,
        "joined_date": member.joined_date,
        "last_visit_date": member.last_visit_date,
        "status": map_member_status(member.status),
        "churn_risk_score": 0,
        "churn_risk_level": ChurnRiskLevel.NONE,
    }
