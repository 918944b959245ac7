"""
Shared fixtures for member sync tests.
"""

from datetime import date
from typing import List, Optional

import pytest

from app.core.interfaces.gym_software import FetchOptions, GymSoftwareAdapter
from app.integrations.base import filter_members, filter_visits
from app.models.integration import ExternalMember, ExternalMemberStatus, ExternalVisit, VisitType
from app.services.member_sync import InMemoryMemberStore
from app.services.sync_status import sync_status


class FakeAdapter(GymSoftwareAdapter):
    """Adapter serving fixed members and visits through the shared filters."""

    def __init__(
        self,
        members: Optional[List[ExternalMember]] = None,
        visits: Optional[List[ExternalVisit]] = None,
        name: str = "Fake",
        connected: bool = True,
    ):
        self.members = list(members or [])
        self.visits = list(visits or [])
        self.name = name
        self.connected = connected
        self.fetch_members_calls = 0
        self.fetch_visits_calls = 0

    def get_name(self) -> str:
        return self.name

    async def test_connection(self) -> bool:
        return self.connected

    async def fetch_members(self, options: Optional[FetchOptions] = None) -> List[ExternalMember]:
        self.fetch_members_calls += 1
        return filter_members(self.members, options)

    async def fetch_member_visits(
        self,
        member_external_id: str,
        options: Optional[FetchOptions] = None,
    ) -> List[ExternalVisit]:
        visits = [v for v in self.visits if v.member_external_id == member_external_id]
        return filter_visits(visits, options)

    async def fetch_all_visits(self, options: Optional[FetchOptions] = None) -> List[ExternalVisit]:
        self.fetch_visits_calls += 1
        return filter_visits(self.visits, options)


def make_member(
    external_id: str,
    status: ExternalMemberStatus = ExternalMemberStatus.ACTIVE,
    joined_date: date = date(2023, 6, 1),
    last_visit_date: Optional[date] = None,
    **kwargs,
) -> ExternalMember:
    return ExternalMember(
        external_id=external_id,
        first_name=kwargs.pop("first_name", "Test"),
        last_name=kwargs.pop("last_name", external_id),
        joined_date=joined_date,
        last_visit_date=last_visit_date,
        status=status,
        **kwargs,
    )


def make_visit(
    external_id: str,
    member_external_id: str,
    visit_date: date,
    visit_type: VisitType = VisitType.VISIT,
) -> ExternalVisit:
    return ExternalVisit(
        external_id=external_id,
        member_external_id=member_external_id,
        visit_date=visit_date,
        visit_type=visit_type,
    )


@pytest.fixture
def store() -> InMemoryMemberStore:
    return InMemoryMemberStore()


@pytest.fixture(autouse=True)
def reset_sync_status():
    sync_status.reset()
    yield
    sync_status.reset()
