"""
Glofox Adapter Implementation.

Delegates to schema.py, client.py / fetchers.py (live data source),
sample_data.py (offline data source) and processors.py (record mapping).
"""

import logging
from typing import Any, Dict

from app.integrations.base import BaseGymAdapter, MemberDataSource
from app.integrations.glofox.processors import process_glofox_member, process_glofox_visit
from app.integrations.glofox.schema import MEMBER_ID_PREFIX
from app.models.integration import ExternalMember, ExternalVisit

logger = logging.getLogger(__name__)


class GlofoxAdapter(BaseGymAdapter):
    """Glofox integration. External member ids look like "GF-<uuid>"."""

    name = "Glofox"

    def __init__(
        self,
        data_source: MemberDataSource,
        credentials_configured: bool = False,
        offline_mode: bool = False,
    ):
        super().__init__(data_source, credentials_configured, offline_mode)
        logger.info(
            f"GlofoxAdapter initialized (data source: {type(data_source).__name__})"
        )

    def native_member_id(self, member_external_id: str) -> str:
        return member_external_id.removeprefix(MEMBER_ID_PREFIX)

    def process_member(self, record: Dict[str, Any]) -> ExternalMember:
        return process_glofox_member(record)

    def process_visit(self, record: Dict[str, Any]) -> ExternalVisit:
        return process_glofox_visit(record)
