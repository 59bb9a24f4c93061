"""Data service backends and process-wide selection."""

from __future__ import annotations

from functools import lru_cache

from loguru import logger

from sandboxlink.client.services.base import DataService, detect_language
from sandboxlink.client.services.fixture import FixtureDataService
from sandboxlink.client.services.remote import RemoteDataService
from sandboxlink.client.settings import SandboxSettings, get_settings
from sandboxlink.client.sync import SyncService
from sandboxlink.client.transport import OrchestratorClient

__all__ = [
    "DataService",
    "FixtureDataService",
    "RemoteDataService",
    "create_data_service",
    "detect_language",
    "get_data_service",
]


def create_data_service(settings: SandboxSettings) -> DataService:
    """Create the data service backend based on configuration."""
    if settings.demo_mode:
        logger.info("Data service: demo fixtures (path={})", settings.fixture_path or "built-in")
        return FixtureDataService(
            fixture_path=settings.fixture_path,
            latency=settings.fixture_latency,
            user_id=settings.user_id,
        )
    logger.info("Data service: orchestrator at {}", settings.orchestrator_url)
    client = OrchestratorClient(settings.orchestrator_url, timeout=settings.request_timeout)
    return RemoteDataService(SyncService(client, user_id=settings.user_id))


@lru_cache(maxsize=1)
def get_data_service() -> DataService:
    """Return the process-wide data service.

    Created on first call from ``get_settings()``.  Tests reset it with
    ``get_data_service.cache_clear()``.
    """
    return create_data_service(get_settings())
