"""
Mindbody integration.
"""

from app.integrations.mindbody.client import MindbodyAPIError, MindbodyClient
from app.integrations.mindbody.fetchers import MindbodyApiDataSource
from app.integrations.mindbody.provider import MindbodyAdapter
from app.integrations.mindbody.sample_data import (
    MindbodySampleDataSource,
    generate_sample_mindbody_data,
)

__all__ = [
    "MindbodyAdapter",
    "MindbodyAPIError",
    "MindbodyApiDataSource",
    "MindbodyClient",
    "MindbodySampleDataSource",
    "generate_sample_mindbody_data",
]
