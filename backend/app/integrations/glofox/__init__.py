"""
Glofox integration.
"""

from app.integrations.glofox.client import GlofoxAPIError, GlofoxClient
from app.integrations.glofox.fetchers import GlofoxApiDataSource
from app.integrations.glofox.provider import GlofoxAdapter
from app.integrations.glofox.sample_data import (
    GlofoxSampleDataSource,
    generate_sample_glofox_data,
)

__all__ = [
    "GlofoxAdapter",
    "GlofoxAPIError",
    "GlofoxApiDataSource",
    "GlofoxClient",
    "GlofoxSampleDataSource",
    "generate_sample_glofox_data",
]
