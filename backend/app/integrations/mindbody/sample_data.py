"""
Sample Mindbody data for local development and offline mode.

Generates an internally consistent snapshot of clients and visits in the
native Mindbody API shape, so the adapter exercises the same processors it
uses against the real API.
"""

import random
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from app.integrations.base import MemberDataSource

FIRST_NAMES = [
    "James", "Sarah", "Michael", "Emma", "David", "Olivia",
    "Robert", "Sophia", "William", "Isabella", "Richard", "Charlotte",
    "Joseph", "Amelia", "Thomas", "Mia", "Charles", "Harper", "Daniel", "Evelyn",
]

LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia",
    "Miller", "Davis", "Rodriguez", "Martinez", "Hernandez", "Lopez",
    "Wilson", "Anderson", "Thomas", "Taylor", "Moore", "Jackson", "Martin", "Lee",
]


def generate_sample_mindbody_data(
    seed: Optional[int] = None,
    today: Optional[date] = None,
    member_count: int = 20,
) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Generates Mindbody clients and client visits.

    Roughly 80% of clients visited in the last 30 days (inactive after 21
    days), 10% lapsed 30-89 days ago, 10% never visited or cancelled.
    Only active clients get a visit history.

    Returns:
        (clients, visits), visits sorted most recent first
    """
    rng = random.Random(seed)
    today = today or date.today()
    modified = datetime.combine(today, time.min, tzinfo=timezone.utc).isoformat()
    clients: List[Dict[str, Any]] = []
    visits: List[Dict[str, Any]] = []
    visit_seq = 50000

    for i in range(member_count):
        client_id = 1000 + i
        first_name = FIRST_NAMES[i % len(FIRST_NAMES)]
        last_name = LAST_NAMES[i % len(LAST_NAMES)]
        days_since_joined = rng.randint(30, 395)
        joined = today - timedelta(days=days_since_joined)

        activity = rng.random()
        last_visit: Optional[date] = None
        status = "Active"
        if activity > 0.2:
            days_since_visit = rng.randint(0, 29)
            last_visit = today - timedelta(days=days_since_visit)
            if days_since_visit > 21:
                status = "Inactive"
        elif activity > 0.1:
            last_visit = today - timedelta(days=rng.randint(30, 89))
            status = "Inactive"
        else:
            status = "Terminated" if rng.random() > 0.5 else "Inactive"

        clients.append({
            "Id": client_id,
            "UniqueId": client_id,
            "FirstName": first_name,
            "LastName": last_name,
            "Email": f"{first_name.lower()}.{last_name.lower()}@example.com",
            "MobilePhone": f"+44{rng.randint(1000000000, 9999999999)}",
            "CreationDate": f"{joined.isoformat()}T00:00:00",
            "LastVisitDate": last_visit.isoformat() if last_visit else None,
            "LastModifiedDateTime": modified,
            "Status": status,
        })

        if last_visit and status == "Active":
            for _ in range(rng.randint(5, 24)):
                visit_day = today - timedelta(days=rng.randint(0, days_since_joined - 1))
                is_class = rng.random() > 0.7
                visit_seq += 1
                visits.append({
                    "Id": visit_seq,
                    "ClientId": str(client_id),
                    "StartDateTime": f"{visit_day.isoformat()}T07:00:00",
                    "ClassId": rng.randint(100, 120) if is_class else None,
                    "AppointmentId": None,
                    "LocationId": 1,
                })

    visits.sort(key=lambda v: v["StartDateTime"], reverse=True)
    return clients, visits


class MindbodySampleDataSource(MemberDataSource):
    """Serves one generated snapshot for the lifetime of the adapter."""

    def __init__(
        self,
        seed: Optional[int] = None,
        today: Optional[date] = None,
        clients: Optional[List[Dict[str, Any]]] = None,
        visits: Optional[List[Dict[str, Any]]] = None,
    ):
        if clients is None or visits is None:
            clients, visits = generate_sample_mindbody_data(seed=seed, today=today)
        self.clients = clients
        self.visits = visits

    async def load_members(self, since: Optional[datetime] = None) -> List[Dict[str, Any]]:
        return list(self.clients)

    async def load_visits(
        self,
        since: Optional[datetime] = None,
        member_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        if member_id is None:
            return list(self.visits)
        return [v for v in self.visits if str(v["ClientId"]) == str(member_id)]
