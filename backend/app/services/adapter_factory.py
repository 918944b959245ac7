"""
Gym Software Adapter Factory.
Implements factory pattern for loading platform adapters by name.
"""

import logging
from functools import lru_cache
from typing import List

from app.core.config import Settings, get_settings
from app.core.interfaces.gym_software import GymSoftwareAdapter
from app.integrations.base import AdapterConfigError, AdapterError

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS: List[str] = ["mindbody", "glofox"]

# Adapters handed out by get_gym_adapter, closed on shutdown
_open_adapters: List[GymSoftwareAdapter] = []


class UnknownProviderError(AdapterError):
    """Raised when an unsupported provider name is requested."""
    pass


def get_gym_adapter(provider: str) -> GymSoftwareAdapter:
    """
    Factory function to get the adapter for a gym platform.

    Adapters are cached per normalized provider name so that, in offline
    mode, repeated syncs observe the same sample snapshot.

    Args:
        provider: Provider name ("mindbody" or "glofox", case-insensitive)

    Returns:
        Configured adapter instance

    Raises:
        UnknownProviderError: If the provider is not supported
        AdapterConfigError: If live mode is requested without credentials
    """
    return _get_cached_adapter(_normalize_provider(provider))


@lru_cache
def _get_cached_adapter(name: str) -> GymSoftwareAdapter:
    adapter = build_gym_adapter(name, get_settings())
    _open_adapters.append(adapter)
    return adapter


def _normalize_provider(provider: str) -> str:
    return (provider or "").strip().lower()


def build_gym_adapter(provider: str, settings: Settings) -> GymSoftwareAdapter:
    """Builds a fresh (uncached) adapter from explicit settings."""
    name = _normalize_provider(provider)
    logger.info(f"🔌 Loading gym software adapter: {name}")

    if name == "mindbody":
        return _load_mindbody_adapter(settings)
    elif name == "glofox":
        return _load_glofox_adapter(settings)

    raise UnknownProviderError(
        f"Unknown provider: {provider}. "
        f"Supported providers: {', '.join(SUPPORTED_PROVIDERS)}"
    )


def _load_mindbody_adapter(settings: Settings) -> GymSoftwareAdapter:
    """
    Loads the Mindbody adapter.

    Raises:
        AdapterConfigError: If credentials are missing outside offline mode
    """
    # Import here to avoid loading integration code if not needed
    from app.integrations.mindbody import (
        MindbodyAdapter,
        MindbodyApiDataSource,
        MindbodyClient,
        MindbodySampleDataSource,
    )

    has_credentials = bool(
        settings.mindbody_api_key
        and settings.mindbody_site_id
        and settings.mindbody_access_token
    )

    if settings.integrations_offline_mode:
        logger.info("✅ Mindbody adapter in offline mode (sample data)")
        return MindbodyAdapter(
            MindbodySampleDataSource(seed=settings.sample_data_seed),
            credentials_configured=has_credentials,
            offline_mode=True,
        )

    if not settings.mindbody_api_key:
        raise AdapterConfigError("MINDBODY_API_KEY not configured")
    if not settings.mindbody_site_id:
        raise AdapterConfigError("MINDBODY_SITE_ID not configured")
    if not settings.mindbody_access_token:
        raise AdapterConfigError("MINDBODY_ACCESS_TOKEN not configured")

    client = MindbodyClient(
        api_key=settings.mindbody_api_key,
        site_id=settings.mindbody_site_id,
        access_token=settings.mindbody_access_token,
        base_url=settings.mindbody_api_base_url,
        timeout=settings.http_timeout_seconds,
    )
    logger.info("✅ Initializing Mindbody adapter (live API)")
    return MindbodyAdapter(MindbodyApiDataSource(client), credentials_configured=True)


def _load_glofox_adapter(settings: Settings) -> GymSoftwareAdapter:
    """
    Loads the Glofox adapter.

    Raises:
        AdapterConfigError: If the access token is missing outside offline mode
    """
    from app.integrations.glofox import (
        GlofoxAdapter,
        GlofoxApiDataSource,
        GlofoxClient,
        GlofoxSampleDataSource,
    )

    has_credentials = bool(settings.glofox_access_token)

    if settings.integrations_offline_mode:
        logger.info("✅ Glofox adapter in offline mode (sample data)")
        return GlofoxAdapter(
            GlofoxSampleDataSource(seed=settings.sample_data_seed),
            credentials_configured=has_credentials,
            offline_mode=True,
        )

    if not settings.glofox_access_token:
        raise AdapterConfigError("GLOFOX_ACCESS_TOKEN not configured")

    client = GlofoxClient(
        access_token=settings.glofox_access_token,
        base_url=settings.glofox_api_base_url,
        business_id=settings.glofox_business_id,
        timeout=settings.http_timeout_seconds,
    )
    logger.info("✅ Initializing Glofox adapter (live API)")
    return GlofoxAdapter(GlofoxApiDataSource(client), credentials_configured=True)


def clear_adapter_cache() -> None:
    """
    Clears cached adapter instances.

    Useful for testing or when credentials are updated at runtime.
    """
    logger.info("🔄 Clearing adapter cache")
    _get_cached_adapter.cache_clear()
    _open_adapters.clear()


async def close_gym_adapters() -> None:
    """Closes every cached adapter (HTTP clients) and empties the cache."""
    for adapter in list(_open_adapters):
        try:
            await adapter.close()
        except Exception as e:
            logger.warning(f"⚠️ Failed to close {adapter.get_name()} adapter: {e}")
    clear_adapter_cache()
