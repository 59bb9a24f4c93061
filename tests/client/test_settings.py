"""Tests for environment-driven settings and backend selection."""

from __future__ import annotations

import pytest

from sandboxlink.client.services import (
    FixtureDataService,
    RemoteDataService,
    create_data_service,
    get_data_service,
)
from sandboxlink.client.settings import SandboxSettings, get_settings


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    # Keep a developer's .env out of the picture.
    monkeypatch.chdir(tmp_path)


def test_defaults() -> None:
    settings = get_settings()

    assert settings.orchestrator_url == "http://localhost:9091"
    assert settings.user_id == "default-user"
    assert settings.demo_mode is False
    assert settings.health_check_interval == 30.0
    assert settings.session_poll_interval == 10.0
    assert settings.session_poll_attempts == 30


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SANDBOXLINK_ORCHESTRATOR_URL", "http://orchestrator.internal:8080")
    monkeypatch.setenv("SANDBOXLINK_DEMO_MODE", "1")
    monkeypatch.setenv("SANDBOXLINK_SESSION_POLL_ATTEMPTS", "5")

    settings = get_settings()

    assert settings.orchestrator_url == "http://orchestrator.internal:8080"
    assert settings.demo_mode is True
    assert settings.session_poll_attempts == 5


def test_settings_are_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    first = get_settings()
    monkeypatch.setenv("SANDBOXLINK_USER_ID", "someone")

    assert get_settings() is first

    get_settings.cache_clear()
    assert get_settings().user_id == "someone"


def test_env_file(tmp_path) -> None:
    (tmp_path / ".env").write_text("SANDBOXLINK_USER_ID=from-file\n", encoding="utf-8")

    assert get_settings().user_id == "from-file"


async def test_demo_mode_selects_fixture_backend() -> None:
    service = create_data_service(SandboxSettings(demo_mode=True, fixture_latency=0.0))
    try:
        assert isinstance(service, FixtureDataService)
        assert service.current_endpoint == "demo://localhost"
    finally:
        await service.aclose()


async def test_default_selects_remote_backend() -> None:
    service = create_data_service(SandboxSettings(orchestrator_url="http://orchestrator.test"))
    try:
        assert isinstance(service, RemoteDataService)
        assert service.current_endpoint == "http://orchestrator.test"
    finally:
        await service.aclose()


async def test_data_service_is_process_wide(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SANDBOXLINK_DEMO_MODE", "true")

    service = get_data_service()
    try:
        assert isinstance(service, FixtureDataService)
        assert get_data_service() is service
    finally:
        await service.aclose()
