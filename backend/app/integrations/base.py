"""
Shared building blocks for gym platform adapters.

Each adapter is split into a data source (where native records come from:
the real HTTP API or the sample generator) and the adapter itself (native
shape -> ExternalMember/ExternalVisit, plus the shared filter semantics).
Swapping the data source never changes the adapter's public surface.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, time, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

from pydantic import ValidationError

from app.core.interfaces.gym_software import FetchOptions, GymSoftwareAdapter
from app.models.integration import ExternalMember, ExternalVisit

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AdapterError(Exception):
    """Base error raised by gym platform adapters."""
    pass


class AdapterConfigError(AdapterError):
    """Raised when an adapter is missing required configuration."""
    pass


class MemberDataSource(ABC):
    """
    Source of native platform records.

    Implementations return records in the platform's own shape; mapping to
    the shared models happens in the adapter.
    """

    @abstractmethod
    async def load_members(self, since: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Loads raw member records, optionally pre-filtered by `since`."""
        pass

    @abstractmethod
    async def load_visits(
        self,
        since: Optional[datetime] = None,
        member_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Loads raw visit records, optionally for one native member id."""
        pass

    async def close(self) -> None:
        """Releases the underlying client, if any."""
        return None


def as_utc(value: datetime | date) -> datetime:
    """
    Normalizes a date or datetime to an aware UTC datetime.

    Dates become midnight UTC; naive datetimes are assumed to be UTC.
    """
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_iso_datetime(value: Any) -> Optional[datetime]:
    """Parses an ISO-8601 string (with optional trailing Z) into an aware datetime."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return as_utc(datetime.fromisoformat(text))
    except ValueError:
        logger.debug(f"Unparseable timestamp: {value!r}")
        return None


def parse_iso_date(value: Any) -> Optional[date]:
    """Parses an ISO date or datetime string into a date."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = parse_iso_datetime(value)
    if parsed is not None:
        return parsed.date()
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        logger.debug(f"Unparseable date: {value!r}")
        return None


def member_updated_at(member: ExternalMember) -> datetime:
    """Last-updated time used by `since` filters (falls back to joined date)."""
    return as_utc(member.updated_at or member.joined_date)


def filter_members(
    members: Sequence[ExternalMember],
    options: Optional[FetchOptions],
) -> List[ExternalMember]:
    """Applies since (inclusive) then offset/limit to members."""
    options = options or FetchOptions()
    result = list(members)
    if options.since is not None:
        since = as_utc(options.since)
        result = [m for m in result if member_updated_at(m) >= since]
    return paginate(result, options)


def filter_visits(
    visits: Sequence[ExternalVisit],
    options: Optional[FetchOptions],
) -> List[ExternalVisit]:
    """Applies since (inclusive, on visit date) then offset/limit to visits."""
    options = options or FetchOptions()
    result = list(visits)
    if options.since is not None:
        since = as_utc(options.since)
        result = [v for v in result if as_utc(v.visit_date) >= since]
    return paginate(result, options)


def paginate(items: List[T], options: FetchOptions) -> List[T]:
    """Slices items by offset/limit."""
    offset = max(0, options.offset or 0)
    if options.limit is None:
        return items[offset:]
    return items[offset:offset + max(0, options.limit)]


class BaseGymAdapter(GymSoftwareAdapter):
    """
    Adapter skeleton shared by all platforms.

    Subclasses provide the platform name, how native ids are derived and the
    record processors; fetching, filtering and connection checks live here.
    """

    name: str = ""

    def __init__(
        self,
        data_source: MemberDataSource,
        credentials_configured: bool = False,
        offline_mode: bool = False,
    ):
        self.data_source = data_source
        self.credentials_configured = credentials_configured
        self.offline_mode = offline_mode

    def get_name(self) -> str:
        """Returns adapter name."""
        return self.name

    async def test_connection(self) -> bool:
        """
        Succeeds when credentials are configured, or always in offline mode.
        """
        logger.info(f"Checking {self.name} connection...")
        if self.credentials_configured or self.offline_mode:
            logger.info(f"{self.name} connection OK")
            return True
        logger.warning(f"{self.name} credentials not configured")
        return False

    async def fetch_members(self, options: Optional[FetchOptions] = None) -> List[ExternalMember]:
        since = options.since if options else None
        raw_members = await self.data_source.load_members(since=since)
        members = self._process_all(raw_members, self.process_member, "member")
        members = filter_members(members, options)
        logger.info(f"{self.name}: fetched {len(members)} members")
        return members

    async def fetch_member_visits(
        self,
        member_external_id: str,
        options: Optional[FetchOptions] = None,
    ) -> List[ExternalVisit]:
        since = options.since if options else None
        raw_visits = await self.data_source.load_visits(
            since=since,
            member_id=self.native_member_id(member_external_id),
        )
        visits = [
            v for v in self._process_all(raw_visits, self.process_visit, "visit")
            if v.member_external_id == member_external_id
        ]
        if options is not None:
            # Offset is not part of the per-member contract
            options = FetchOptions(since=options.since, limit=options.limit)
        return filter_visits(visits, options)

    async def fetch_all_visits(self, options: Optional[FetchOptions] = None) -> List[ExternalVisit]:
        since = options.since if options else None
        raw_visits = await self.data_source.load_visits(since=since)
        visits = self._process_all(raw_visits, self.process_visit, "visit")
        visits = filter_visits(visits, options)
        logger.info(f"{self.name}: fetched {len(visits)} visits")
        return visits

    async def close(self) -> None:
        await self.data_source.close()

    def _process_all(
        self,
        records: Sequence[Dict[str, Any]],
        processor: Callable[[Dict[str, Any]], T],
        kind: str,
    ) -> List[T]:
        processed = []
        for record in records:
            try:
                processed.append(processor(record))
            except (ValidationError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"⚠️ {self.name}: skipping malformed {kind} record: {e}")
                continue
        return processed

    @abstractmethod
    def native_member_id(self, member_external_id: str) -> str:
        """Converts an external member id back to the platform's native id."""
        pass

    @abstractmethod
    def process_member(self, record: Dict[str, Any]) -> ExternalMember:
        """Maps a native member record."""
        pass

    @abstractmethod
    def process_visit(self, record: Dict[str, Any]) -> ExternalVisit:
        """Maps a native visit record."""
        pass
