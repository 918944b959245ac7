"""
Mindbody API Client.
Handles authentication headers and offset pagination for the Public API v6.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from app.integrations.base import AdapterError
from app.integrations.mindbody.schema import PAGE_SIZE

logger = logging.getLogger(__name__)


class MindbodyAPIError(AdapterError):
    """Raised when Mindbody API returns an error."""
    pass


class MindbodyClient:
    """
    Mindbody REST API Client.

    Authenticates with API key, site id and a staff bearer token.
    Supports limit/offset pagination.
    """

    def __init__(
        self,
        api_key: str,
        site_id: str,
        access_token: str,
        base_url: str = "https://api.mindbodyonline.com/public/v6",
        timeout: float = 30.0,
    ):
        """
        Initialize Mindbody client.

        Args:
            api_key: Mindbody developer API key
            site_id: Mindbody site (studio) id
            access_token: Staff user token
            base_url: API base URL
            timeout: HTTP request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.site_id = site_id

        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={
                "Api-Key": api_key,
                "Site-ID": site_id,
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
        )

        logger.info(f"MindbodyClient initialized (site: {site_id})")

    async def get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Makes an authenticated GET request.

        Raises:
            MindbodyAPIError: If API returns an error or is unreachable
        """
        url = f"{self.base_url}{endpoint}"

        try:
            response = await self._client.get(url, params=params)
        except httpx.RequestError as e:
            raise MindbodyAPIError(f"Network error: {e}") from e

        if response.status_code >= 400:
            error_msg = f"Mindbody API error: {response.status_code} - {response.text}"
            logger.error(error_msg)
            raise MindbodyAPIError(error_msg)

        if not response.text or response.text.strip() == "":
            return {}

        return response.json()

    async def fetch_all(
        self,
        endpoint: str,
        data_key: str,
        params: Optional[Dict[str, Any]] = None,
        page_size: int = PAGE_SIZE,
    ) -> List[Dict[str, Any]]:
        """
        Fetches all records from an endpoint with offset pagination.

        Stops when a page comes back shorter than the page size.

        Args:
            endpoint: API endpoint (e.g., "/client/clients")
            data_key: Key in the response containing the records (e.g., "Clients")
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

            data = response.get(data_key) or []
            all_data.extend(data)
            logger.debug(f"  Page {page}: {len(data)} records (Total: {len(all_data)})")

            if len(data) < page_size:
                break

            offset += len(data)
            page += 1

        logger.info(f"Total {data_key} fetched: {len(all_data)} records")
        return all_data

    async def close(self):
        """Closes the HTTP client."""
        await self._client.aclose()
        logger.info("MindbodyClient closed")
