"""
Member Store Interface.

The narrow persistence contract the sync orchestrator depends on: identity
mappings, member rows and attendance activities. Keeping it this small lets
the reconciliation logic run against the SQLAlchemy store in production and
the in-memory store in tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from app.models.member import ActivityType, ChurnRiskLevel


class StoreError(Exception):
    """Base error raised by member stores."""
    pass


class MappingConflictError(StoreError):
    """Raised when an identity mapping for (gym, source, external id) already exists."""
    pass


class MemberNotFoundError(StoreError):
    """Raised when a member row referenced by id does not exist."""
    pass


@dataclass(frozen=True)
class MemberRiskRow:
    """Member fields needed by the risk recompute."""
    member_id: str
    joined_date: date
    last_visit_date: Optional[date]


class MemberStore(ABC):
    """Persistence operations used by member and visit sync."""

    # --- Identity mappings -------------------------------------------------

    @abstractmethod
    async def get_mapping(self, gym_id: str, source: str, external_id: str) -> Optional[str]:
        """Returns the internal member id mapped to an external id, if any."""
        pass

    @abstractmethod
    async def list_mappings(self, gym_id: str, source: str) -> Dict[str, str]:
        """Returns {external id: member id} for one gym and source."""
        pass

    @abstractmethod
    async def insert_mapping(
        self,
        gym_id: str,
        source: str,
        external_id: str,
        member_id: str,
    ) -> None:
        """
        Inserts an identity mapping.

        Raises:
            MappingConflictError: If the (gym, source, external id) triple is taken
        """
        pass

    # --- Members -----------------------------------------------------------

    @abstractmethod
    async def insert_member(self, data: Dict[str, Any]) -> str:
        """Inserts a member row and returns its id."""
        pass

    @abstractmethod
    async def update_member(self, member_id: str, data: Dict[str, Any]) -> None:
        """
        Updates a member row in place.

        Raises:
            MemberNotFoundError: If no member has that id
        """
        pass

    @abstractmethod
    async def delete_member(self, member_id: str) -> None:
        """Deletes a member row (used to undo a lost mapping race)."""
        pass

    # --- Activities --------------------------------------------------------

    @abstractmethod
    async def activity_exists(
        self,
        member_id: str,
        activity_date: date,
        activity_type: ActivityType,
    ) -> bool:
        """Checks for an activity with the same (member, date, type)."""
        pass

    @abstractmethod
    async def insert_activity(
        self,
        member_id: str,
        activity_date: date,
        activity_type: ActivityType,
    ) -> None:
        """Inserts an activity row."""
        pass

    # --- Risk --------------------------------------------------------------

    @abstractmethod
    async def list_members_for_risk(self, gym_id: str) -> List[MemberRiskRow]:
        """Returns every member of a gym with the inputs the risk recompute needs."""
        pass

    @abstractmethod
    async def count_recent_activities(self, member_id: str, since: date) -> int:
        """Counts a member's activities on or after `since`."""
        pass

    @abstractmethod
    async def update_member_risk(
        self,
        member_id: str,
        score: int,
        level: ChurnRiskLevel,
        calculated_at: datetime,
    ) -> None:
        """Persists recomputed risk figures."""
        pass
