"""Shared fixtures for sync-client tests."""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
from fakes import BASE_URL, FakeOrchestrator

from sandboxlink.client.sync import SyncService
from sandboxlink.client.transport import OrchestratorClient


@pytest.fixture
def orchestrator() -> FakeOrchestrator:
    return FakeOrchestrator()


@pytest.fixture
async def client(orchestrator: FakeOrchestrator) -> AsyncIterator[OrchestratorClient]:
    c = OrchestratorClient(BASE_URL, transport=httpx.MockTransport(orchestrator))
    yield c
    await c.aclose()


@pytest.fixture
def sync(client: OrchestratorClient) -> SyncService:
    return SyncService(client, user_id="u1")
