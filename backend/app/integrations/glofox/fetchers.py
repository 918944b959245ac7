"""
Data Fetching Logic for Glofox.

Live data source backed by the Glofox API. Visits are the union of
attendances (check-ins) and class bookings.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.integrations.base import MemberDataSource
from app.integrations.glofox.client import GlofoxClient
from app.integrations.glofox.schema import get_endpoint, get_list_keys

logger = logging.getLogger(__name__)


def _since_params(since: Optional[datetime]) -> Dict[str, Any]:
    if since is None:
        return {}
    return {"updated_after": since.isoformat()}


class GlofoxApiDataSource(MemberDataSource):
    """Loads native member, attendance and booking records from Glofox."""

    def __init__(self, client: GlofoxClient):
        self.client = client

    async def load_members(self, since: Optional[datetime] = None) -> List[Dict[str, Any]]:
        logger.info("  Fetching members from Glofox...")
        return await self.client.fetch_all(
            get_endpoint("members"),
            get_list_keys("members"),
            params=_since_params(since),
        )

    async def load_visits(
        self,
        since: Optional[datetime] = None,
        member_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params = _since_params(since)
        if member_id is not None:
            params["member_id"] = member_id

        logger.info("  Fetching attendances from Glofox...")
        attendances = await self.client.fetch_all(
            get_endpoint("attendances"),
            get_list_keys("attendances"),
            params=params,
        )
        logger.info("  Fetching bookings from Glofox...")
        bookings = await self.client.fetch_all(
            get_endpoint("bookings"),
            get_list_keys("bookings"),
            params=params,
        )

        for booking in bookings:
            booking.setdefault("record_kind", "booking")
        return attendances + bookings

    async def close(self) -> None:
        await self.client.close()
