"""
Data Fetching Logic for Mindbody.

Live data source backed by the Mindbody Public API.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.integrations.base import MemberDataSource
from app.integrations.mindbody.client import MindbodyClient
from app.integrations.mindbody.schema import get_data_key, get_endpoint

logger = logging.getLogger(__name__)


def _since_params(since: Optional[datetime]) -> Dict[str, Any]:
    if since is None:
        return {}
    return {"lastModifiedDate": since.isoformat()}


class MindbodyApiDataSource(MemberDataSource):
    """Loads native client and visit records from the Mindbody API."""

    def __init__(self, client: MindbodyClient):
        self.client = client

    async def load_members(self, since: Optional[datetime] = None) -> List[Dict[str, Any]]:
        logger.info("  Fetching clients from Mindbody...")
        return await self.client.fetch_all(
            get_endpoint("clients"),
            get_data_key("clients"),
            params=_since_params(since),
        )

    async def load_visits(
        self,
        since: Optional[datetime] = None,
        member_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params = _since_params(since)
        if since is not None:
            params["startDate"] = since.date().isoformat()
        if member_id is not None:
            params["clientId"] = member_id

        logger.info("  Fetching client visits from Mindbody...")
        return await self.client.fetch_all(
            get_endpoint("client_visits"),
            get_data_key("client_visits"),
            params=params,
        )

    async def close(self) -> None:
        await self.client.close()
