"""
Sample Glofox data for local development and offline mode.

Generates members and attendances in the native Glofox shape.
"""

import random
import uuid
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from app.integrations.base import MemberDataSource

FIRST_NAMES = [
    "Alex", "Jessica", "Chris", "Lauren", "Matt", "Rachel",
    "Ryan", "Nicole", "Kevin", "Amanda", "Brian", "Michelle",
    "Jason", "Stephanie", "Eric", "Jennifer", "Mark", "Lisa",
    "Paul", "Ashley",
]

LAST_NAMES = [
    "Taylor", "White", "Harris", "Martin", "Thompson", "Garcia",
    "Martinez", "Robinson", "Clark", "Rodriguez", "Lewis", "Lee",
    "Walker", "Hall", "Allen", "Young", "King", "Wright", "Lopez", "Hill",
]


def _uuid(rng: random.Random) -> str:
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


def generate_sample_glofox_data(
    seed: Optional[int] = None,
    today: Optional[date] = None,
    member_count: int = 20,
) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Generates Glofox members and attendances.

    Roughly 75% of members checked in within 28 days (inactive after 14
    days), 15% lapsed 28-87 days ago, 10% never checked in or cancelled.
    Only active members get a check-in history.

    Returns:
        (members, attendances), attendances sorted most recent first
    """
    rng = random.Random(seed)
    today = today or date.today()
    modified = datetime.combine(today, time.min, tzinfo=timezone.utc).isoformat()
    members: List[Dict[str, Any]] = []
    attendances: List[Dict[str, Any]] = []

    for i in range(member_count):
        member_id = _uuid(rng)
        first_name = FIRST_NAMES[i % len(FIRST_NAMES)]
        last_name = LAST_NAMES[i % len(LAST_NAMES)]
        days_since_joined = rng.randint(30, 395)
        joined = today - timedelta(days=days_since_joined)

        activity = rng.random()
        last_check_in: Optional[date] = None
        status = "active"
        if activity > 0.25:
            days_since_check_in = rng.randint(0, 27)
            last_check_in = today - timedelta(days=days_since_check_in)
            if days_since_check_in > 14:
                status = "inactive"
        elif activity > 0.1:
            last_check_in = today - timedelta(days=rng.randint(28, 87))
            status = "inactive"
        else:
            status = "cancelled" if rng.random() > 0.5 else "inactive"

        members.append({
            "_id": member_id,
            "first_name": first_name,
            "last_name": last_name,
            "email": f"{first_name.lower()}.{last_name.lower()}@example.com",
            "phone": f"+44{rng.randint(1000000000, 9999999999)}",
            "join_date": joined.isoformat(),
            "last_check_in": last_check_in.isoformat() if last_check_in else None,
            "status": status,
            "branch_id": "STUDIO-001",
            "updated_at": modified,
        })

        if last_check_in and status == "active":
            for _ in range(rng.randint(3, 27)):
                check_in_day = today - timedelta(days=rng.randint(0, days_since_joined - 1))
                attendances.append({
                    "_id": _uuid(rng),
                    "member_id": member_id,
                    "date": check_in_day.isoformat(),
                    "type": "check_in",
                    "studio_id": "STUDIO-001",
                })

    attendances.sort(key=lambda a: a["date"], reverse=True)
    return members, attendances


class GlofoxSampleDataSource(MemberDataSource):
    """Serves one generated snapshot for the lifetime of the adapter."""

    def __init__(
        self,
        seed: Optional[int] = None,
        today: Optional[date] = None,
        members: Optional[List[Dict[str, Any]]] = None,
        attendances: Optional[List[Dict[str, Any]]] = None,
    ):
        if members is None or attendances is None:
            members, attendances = generate_sample_glofox_data(seed=seed, today=today)
        self.members = members
        self.attendances = attendances

    async def load_members(self, since: Optional[datetime] = None) -> List[Dict[str, Any]]:
        return list(self.members)

    async def load_visits(
        self,
        since: Optional[datetime] = None,
        member_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        if member_id is None:
            return list(self.attendances)
        return [a for a in self.attendances if a["member_id"] == member_id]
