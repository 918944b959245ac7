"""
Mindbody Adapter Implementation.

Thin orchestration layer that delegates to specialized modules:
- schema.py: endpoints and status vocabulary
- client.py / fetchers.py: live API data source
- sample_data.py: offline data source
- processors.py: native record mapping
"""

import logging
from typing import Any, Dict

from app.integrations.base import BaseGymAdapter, MemberDataSource
from app.integrations.mindbody.processors import (
    process_mindbody_client,
    process_mindbody_visit,
)
from app.integrations.mindbody.schema import MEMBER_ID_PREFIX
from app.models.integration import ExternalMember, ExternalVisit

logger = logging.getLogger(__name__)


class MindbodyAdapter(BaseGymAdapter):
    """Mindbody integration. External member ids look like "MB-1000"."""

    name = "Mindbody"

    def __init__(
        self,
        data_source: MemberDataSource,
        credentials_configured: bool = False,
        offline_mode: bool = False,
    ):
        super().__init__(data_source, credentials_configured, offline_mode)
        logger.info(
            f"MindbodyAdapter initialized (data source: {type(data_source).__name__})"
        )

    def native_member_id(self, member_external_id: str) -> str:
        return member_external_id.removeprefix(MEMBER_ID_PREFIX)

    def process_member(self, record: Dict[str, Any]) -> ExternalMember:
        return process_mindbody_client(record)

    def process_visit(self, record: Dict[str, Any]) -> ExternalVisit:
        return process_mindbody_visit(record)
