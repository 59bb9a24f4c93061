"""Shared test fixtures.

Settings and the process-wide data service are cached; every test starts
from a clean cache so environment overrides take effect.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from sandboxlink.client.services import get_data_service
from sandboxlink.client.settings import get_settings


@pytest.fixture(autouse=True)
def _reset_caches() -> Iterator[None]:
    get_settings.cache_clear()
    get_data_service.cache_clear()
    yield
    get_settings.cache_clear()
    get_data_service.cache_clear()
