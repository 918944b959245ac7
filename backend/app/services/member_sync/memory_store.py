"""
In-memory member store.

Dict-backed implementation of MemberStore with the same uniqueness rules as
the database (one mapping per gym/source/external id). Used by tests and for
local runs without PostgreSQL.
"""

import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Set, Tuple

from app.models.member import ActivityType, ChurnRiskLevel
from app.services.member_sync.store import (
    MappingConflictError,
    MemberNotFoundError,
    MemberRiskRow,
    MemberStore,
)


class InMemoryMemberStore(MemberStore):
    """MemberStore kept entirely in process memory."""

    def __init__(self):
        self.members: Dict[str, Dict[str, Any]] = {}
        self.mappings: Dict[Tuple[str, str, str], str] = {}
        self.activities: List[Dict[str, Any]] = []
        self._activity_keys: Set[Tuple[str, date, ActivityType]] = set()

    async def get_mapping(self, gym_id: str, source: str, external_id: str) -> Optional[str]:
        return self.mappings.get((gym_id, source, external_id))

    async def list_mappings(self, gym_id: str, source: str) -> Dict[str, str]:
        return {
            external_id: member_id
            for (g, s, external_id), member_id in self.mappings.items()
            if g == gym_id and s == source
        }

    async def insert_mapping(
        self,
        gym_id: str,
        source: str,
        external_id: str,
        member_id: str,
    ) -> None:
        key = (gym_id, source, external_id)
        if key in self.mappings:
            raise MappingConflictError(
                f"Mapping already exists for {source}:{external_id} in gym {gym_id}"
            )
        self.mappings[key] = member_id

    async def insert_member(self, data: Dict[str, Any]) -> str:
        member_id = str(uuid.uuid4())
        self.members[member_id] = {"id": member_id, **data}
        return member_id

    async def update_member(self, member_id: str, data: Dict[str, Any]) -> None:
        if member_id not in self.members:
            raise MemberNotFoundError(f"Member {member_id} not found")
        self.members[member_id].update(data)

    async def delete_member(self, member_id: str) -> None:
        self.members.pop(member_id, None)

    async def activity_exists(
        self,
        member_id: str,
        activity_date: date,
        activity_type: ActivityType,
    ) -> bool:
        return (member_id, activity_date, activity_type) in self._activity_keys

    async def insert_activity(
        self,
        member_id: str,
        activity_date: date,
        activity_type: ActivityType,
    ) -> None:
        if member_id not in self.members:
            raise MemberNotFoundError(f"Member {member_id} not found")
        self.activities.append({
            "member_id": member_id,
            "activity_date": activity_date,
            "activity_type": activity_type,
        })
        self._activity_keys.add((member_id, activity_date, activity_type))

    async def list_members_for_risk(self, gym_id: str) -> List[MemberRiskRow]:
        return [
            MemberRiskRow(
                member_id=member_id,
                joined_date=row["joined_date"],
                last_visit_date=row.get("last_visit_date"),
            )
            for member_id, row in self.members.items()
            if row.get("gym_id") == gym_id
        ]

    async def count_recent_activities(self, member_id: str, since: date) -> int:
        return sum(
            1 for a in self.activities
            if a["member_id"] == member_id and a["activity_date"] >= since
        )

    async def update_member_risk(
        self,
        member_id: str,
        score: int,
        level: ChurnRiskLevel,
        calculated_at: datetime,
    ) -> None:
        await self.update_member(member_id, {
            "churn_risk_score": score,
            "churn_risk_level": level,
            "last_risk_calculated_at": calculated_at,
        })
