"""
Abstract Gym Software Adapter Interface.
Defines the read-only contract that all gym platform integrations must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from app.models.integration import ExternalMember, ExternalVisit


@dataclass(frozen=True)
class FetchOptions:
    """
    Filters accepted by every fetch call.

    Attributes:
        since: Inclusive lower bound on the record's last-updated time
        limit: Maximum number of records to return (None = all)
        offset: Records to skip, applied after filtering
    """
    since: Optional[datetime] = None
    limit: Optional[int] = None
    offset: int = 0


class GymSoftwareAdapter(ABC):
    """
    Abstract base class for gym management platform integrations.

    Every platform (Mindbody, Glofox, ...) wraps its native data shape behind
    this interface, so the sync orchestrator never needs to know which
    platform it is talking to. All operations are read-only; implementations
    may paginate internally but callers only see the result of one filtered
    call.
    """

    @abstractmethod
    def get_name(self) -> str:
        """
        Returns the adapter name.

        The lower-cased name is the partition key of identity mappings, so it
        must be stable across releases.

        Returns:
            Adapter name (e.g., "Mindbody", "Glofox")
        """
        pass

    @abstractmethod
    async def test_connection(self) -> bool:
        """
        Verifies that the platform is reachable and credentials are configured.

        Returns:
            True if connection successful, False otherwise
        """
        pass

    @abstractmethod
    async def fetch_members(
        self,
        options: Optional[FetchOptions] = None,
    ) -> List[ExternalMember]:
        """
        Fetches members from the platform.

        Args:
            options: Optional since/limit/offset filters

        Returns:
            List of external members

        Example:
            >>> await adapter.fetch_members(FetchOptions(limit=2))
            [ExternalMember(external_id="MB-1000", ...), ExternalMember(external_id="MB-1001", ...)]
        """
        pass

    @abstractmethod
    async def fetch_member_visits(
        self,
        member_external_id: str,
        options: Optional[FetchOptions] = None,
    ) -> List[ExternalVisit]:
        """
        Fetches visits/check-ins for a single member.

        Args:
            member_external_id: The platform's member id
            options: Optional since/limit filters (offset is ignored)

        Returns:
            List of visits for that member
        """
        pass

    @abstractmethod
    async def fetch_all_visits(
        self,
        options: Optional[FetchOptions] = None,
    ) -> List[ExternalVisit]:
        """
        Fetches visits/check-ins for all members (bulk sync).

        Args:
            options: Optional since/limit/offset filters

        Returns:
            List of visits
        """
        pass

    async def close(self) -> None:
        """Releases any held resources (HTTP clients). No-op by default."""
        return None
