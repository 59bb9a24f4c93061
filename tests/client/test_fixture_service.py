"""Tests for the in-memory demo backend."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from datetime import UTC, datetime

import pytest

from sandboxlink.client.errors import ResourceNotFoundError
from sandboxlink.client.models import (
    ConnectionStatus,
    FileKind,
    LifecycleStatus,
    MessageStatus,
    MessageType,
)
from sandboxlink.client.services import DataService, FixtureDataService
from sandboxlink.client.services.fixture import DEMO_WORKSPACE_ID


@pytest.fixture
async def service() -> AsyncIterator[FixtureDataService]:
    svc = FixtureDataService(startup_delay=0, reply_delay=(0, 0))
    yield svc
    await svc.aclose()


async def _settle() -> None:
    # Let zero-delay background tasks run.
    for _ in range(5):
        await asyncio.sleep(0)


async def test_implements_protocol(service: FixtureDataService) -> None:
    assert isinstance(service, DataService)


async def test_health_is_always_connected(service: FixtureDataService) -> None:
    report = await service.check_health()
    assert report.status == ConnectionStatus.CONNECTED
    assert report.version == "demo-1.0.0"


async def test_seeded_conversations(service: FixtureDataService) -> None:
    conversations = await service.load_conversations()

    assert [c.title for c in conversations] == ["React App Development", "API Integration", "Database Design"]
    assert [c.sandbox_status for c in conversations] == [
        ConnectionStatus.CONNECTED,
        ConnectionStatus.CONNECTING,
        ConnectionStatus.DISCONNECTED,
    ]
    assert conversations[0].messages[2].metadata is not None
    assert conversations[0].messages[2].metadata.command is not None


async def test_create_conversation_simulates_startup() -> None:
    service = FixtureDataService(startup_delay=0.05)
    try:
        conversation = await service.create_conversation("New work")
        assert conversation.sandbox_status == ConnectionStatus.CONNECTING
        assert len(conversation.id) == 8

        await asyncio.sleep(0.1)

        refreshed = await service.get_conversation(conversation.id)
        assert refreshed.sandbox_status == ConnectionStatus.CONNECTED
        listed = await service.load_conversations()
        assert listed[0].id == conversation.id
    finally:
        await service.aclose()


async def test_send_message_gets_simulated_reply(service: FixtureDataService) -> None:
    message = await service.send_message(DEMO_WORKSPACE_ID, "demo0003", "hello")

    assert message.status == MessageStatus.SENT
    assert message.type == MessageType.USER

    await _settle()

    messages = await service.get_messages(DEMO_WORKSPACE_ID, "demo0003")
    assert [m.type for m in messages] == [MessageType.USER, MessageType.ASSISTANT]
    assert messages[1].content


async def test_returned_objects_are_copies(service: FixtureDataService) -> None:
    messages = await service.get_messages(DEMO_WORKSPACE_ID, "demo0001")
    messages.clear()
    assert len(await service.get_messages(DEMO_WORKSPACE_ID, "demo0001")) == 3


async def test_unknown_ids_raise(service: FixtureDataService) -> None:
    with pytest.raises(ResourceNotFoundError):
        await service.get_conversation("missing")
    with pytest.raises(ResourceNotFoundError):
        await service.get_workspace("missing")
    with pytest.raises(ResourceNotFoundError):
        await service.get_session("other-workspace", "demo0001")
    with pytest.raises(ResourceNotFoundError):
        await service.create_session("missing", "x")


async def test_workspace_and_session_lifecycle(service: FixtureDataService) -> None:
    workspace = await service.create_workspace("Scratch", "https://github.com/acme/widgets")
    assert workspace.status == LifecycleStatus.CREATING
    assert workspace.config.repository is not None
    assert workspace.config.repository.ref == "main"

    session = await service.create_session(workspace.id, "first")
    assert session.state == LifecycleStatus.CREATING

    await _settle()

    assert (await service.get_workspace(workspace.id)).status == LifecycleStatus.RUNNING
    assert (await service.get_session(workspace.id, session.id)).proxyable is True
    assert [s.id for s in await service.list_sessions(workspace.id)] == [session.id]

    await service.delete_workspace(workspace.id)
    assert workspace.id not in [w.id for w in await service.list_workspaces()]
    with pytest.raises(ResourceNotFoundError):
        await service.get_session(workspace.id, session.id)


async def test_sandbox_reads(service: FixtureDataService) -> None:
    files = await service.list_files(DEMO_WORKSPACE_ID, "demo0001")
    assert FileKind.DIRECTORY in {f.type for f in files}

    content = await service.read_file(DEMO_WORKSPACE_ID, "demo0001", "/package.json")
    assert content.language == "json"
    assert json.loads(content.content)["name"] == "my-app"

    result = await service.execute_command(DEMO_WORKSPACE_ID, "demo0001", "git status")
    assert result.exit_code == 0
    assert "On branch main" in result.output

    status = await service.get_git_status(DEMO_WORKSPACE_ID, "demo0001")
    assert status.status == "dirty"


async def test_delete_conversation_by_short_id(service: FixtureDataService) -> None:
    await service.delete_conversation("demo0002")
    assert "demo0002" not in [c.id for c in await service.load_conversations()]

    # Deleting again is a no-op.
    await service.delete_conversation("demo0002")


async def test_fixture_file_is_loaded(tmp_path) -> None:
    now = datetime(2024, 1, 1, tzinfo=UTC).isoformat()
    seed = {
        "workspaces": [{"id": "w1", "name": "From file", "created_at": now, "updated_at": now, "status": "running"}],
        "sessions": [
            {
                "id": "file0001",
                "name": "Seeded",
                "workspace_id": "w1",
                "created_at": now,
                "updated_at": now,
                "state": "running",
                "ready": True,
            }
        ],
    }
    path = tmp_path / "demo.json"
    path.write_text(json.dumps(seed), encoding="utf-8")

    service = FixtureDataService(fixture_path=path)
    conversations = await service.load_conversations()

    assert [c.title for c in conversations] == ["Seeded"]
    assert conversations[0].sandbox_status == ConnectionStatus.CONNECTED
    assert [w.name for w in await service.list_workspaces()] == ["From file"]


async def test_aclose_cancels_pending_simulation() -> None:
    service = FixtureDataService(reply_delay=(10, 10))
    await service.send_message(DEMO_WORKSPACE_ID, "demo0001", "hi")

    await service.aclose()
    await _settle()

    messages = await service.get_messages(DEMO_WORKSPACE_ID, "demo0001")
    assert messages[-1].type == MessageType.USER


async def test_configure_keeps_demo_endpoint(service: FixtureDataService) -> None:
    service.configure(user_id="someone", endpoint="http://ignored.test")
    assert service.current_endpoint == "demo://localhost"


async def test_terminal_history_records_commands(service: FixtureDataService) -> None:
    seeded = await service.get_terminal_history(DEMO_WORKSPACE_ID, "demo0001")
    assert [e.command for e in seeded] == ["npm install", "npm run build"]

    assert await service.get_terminal_history(DEMO_WORKSPACE_ID, "demo0003") == []
    result = await service.execute_command(DEMO_WORKSPACE_ID, "demo0003", "ls -la")

    history = await service.get_terminal_history(DEMO_WORKSPACE_ID, "demo0003")
    assert [(e.command, e.output) for e in history] == [("ls -la", result.output)]

    history.clear()
    assert len(await service.get_terminal_history(DEMO_WORKSPACE_ID, "demo0003")) == 1

    with pytest.raises(ResourceNotFoundError):
        await service.get_terminal_history("other-workspace", "demo0003")
