"""
Glofox API Client.
Handles bearer authentication and offset pagination against a
(possibly tenant-specific) Glofox base URL.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from app.integrations.base import AdapterError
from app.integrations.glofox.schema import PAGE_SIZE

logger = logging.getLogger(__name__)

DEFAULT_GLOFOX_BASE_URL = "https://api.glofox.com/v2"


class GlofoxAPIError(AdapterError):
    """Raised when Glofox API returns an error."""
    pass


def pick_list(response: Any, keys: Sequence[str]) -> List[Dict[str, Any]]:
    """
    Extracts the record list from a Glofox response.

    Responses are either a bare list or an object wrapping the list under
    one of several keys depending on the tenant.
    """
    if isinstance(response, list):
        return response
    if not isinstance(response, dict):
        return []
    for key in keys:
        value = response.get(key)
        if isinstance(value, list):
            return value
    return []


class GlofoxClient:
    """
    Glofox REST API Client.

    Uses Bearer token authentication; base URL can be tenant-specific.
    """

    def __init__(
        self,
        access_token: str,
        base_url: Optional[str] = None,
        business_id: Optional[str] = None,
        timeout: float = 30.0,
    ):
        """
        Initialize Glofox client.

        Args:
            access_token: Glofox API token
            base_url: API base URL (defaults to the public v2 API)
            business_id: Optional branch/business id sent with each request
            timeout: HTTP request timeout in seconds
        """
        self.base_url = (base_url or DEFAULT_GLOFOX_BASE_URL).rstrip("/")
        self.business_id = business_id

        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
        )

        logger.info(f"GlofoxClient initialized (url: {self.base_url})")

    async def get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Makes an authenticated GET request.

        Raises:
            GlofoxAPIError: If API returns an error or is unreachable
        """
        url = f"{self.base_url}{endpoint}"
        params = dict(params or {})
        if self.business_id:
            params.setdefault("branch_id", self.business_id)

        try:
            response = await self._client.get(url, params=params)
        except httpx.RequestError as e:
            raise GlofoxAPIError(f"Network error: {e}") from e

        if response.status_code >= 400:
            error_msg = f"Glofox API error: {response.status_code} - {response.text}"
            logger.error(error_msg)
            raise GlofoxAPIError(error_msg)

        if not response.text or response.text.strip() == "":
            return {}

        return response.json()

    async def fetch_all(
        self,
        endpoint: str,
        list_keys: Sequence[str],
        params: Optional[Dict[str, Any]] = None,
        page_size: int = PAGE_SIZE,
    ) -> List[Dict[str, Any]]:
        """
        Fetches all records from an endpoint with offset pagination.

        Args:
            endpoint: API endpoint (e.g., "/members")
            list_keys: Response keys that may hold the records
            params: Extra query parameters
            page_size: Records per page

        Returns:
            List of all records
        """
        all_data: List[Dict[str, Any]] = []
        offset = 0
        page = 1

        while True:
            page_params = dict(params or {})
            page_params.update({"limit": page_size, "offset": offset})

            logger.debug(f"Fetching {endpoint} page {page}...")
            response = await self.get(endpoint, params=page_params)

            data = pick_list(response, list_keys)
            all_data.extend(data)
            logger.debug(f"  Page {page}: {len(data)} records (Total: {len(all_data)})")

            if len(data) < page_size:
                break

            offset += len(data)
            page += 1

        logger.info(f"Total {endpoint} fetched: {len(all_data)} records")
        return all_data

    async def close(self):
        """Closes the HTTP client."""
        await self._client.aclose()
        logger.info("GlofoxClient closed")
