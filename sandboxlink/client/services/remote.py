"""Live data service backed by the orchestrator.

A thin layer over ``SyncService``: the sync service returns raw sandbox
responses, this class turns them into typed results.  A sandbox answering
with a non-2xx status, or with a body that is not the expected JSON, raises
``SandboxRequestError``.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from loguru import logger
from pydantic import ValidationError

from sandboxlink.client.errors import ResourceNotFoundError, SandboxRequestError
from sandboxlink.client.models import (
    CommandResult,
    Conversation,
    FileContent,
    FileEntry,
    GitFileChange,
    GitStatus,
    HealthReport,
    Message,
    MessageStatus,
    MessageType,
    SandboxResponse,
    Session,
    TerminalEntry,
    Workspace,
)
from sandboxlink.client.services.base import detect_language
from sandboxlink.client.sync import SyncService

# -- Body decoding -------------------------------------------------------------


def _check(response: SandboxResponse, action: str) -> SandboxResponse:
    if not response.ok:
        msg = f"Sandbox request failed: {action}"
        raise SandboxRequestError(msg, status_code=response.status_code, body=response.body)
    return response


def _decode(response: SandboxResponse, action: str) -> Any:
    """Parse a successful sandbox JSON body.  Empty bodies decode to ``None``."""
    _check(response, action)
    if not response.body:
        return None
    try:
        return json.loads(response.body)
    except ValueError as exc:
        msg = f"Invalid JSON from sandbox: {action}"
        raise SandboxRequestError(msg, status_code=response.status_code, body=response.body) from exc


def _malformed(response: SandboxResponse, action: str, exc: Exception) -> SandboxRequestError:
    msg = f"Unexpected sandbox response for {action}: {exc}"
    return SandboxRequestError(msg, status_code=response.status_code, body=response.body)


def _message_from_payload(item: dict[str, Any], session_id: str) -> Message:
    return Message(
        id=str(item.get("id") or uuid4().hex),
        session_id=session_id,
        type=item.get("type") or MessageType.ASSISTANT,
        content=str(item.get("content") or ""),
        status=item.get("status") or MessageStatus.SENT,
        timestamp=item.get("timestamp") or datetime.now(UTC),
        metadata=item.get("metadata"),
    )


class RemoteDataService:
    """``DataService`` implementation for a live orchestrator."""

    def __init__(self, sync: SyncService) -> None:
        self._sync = sync

    # -- Configuration ---------------------------------------------------------

    @property
    def current_endpoint(self) -> str:
        return self._sync.endpoint

    def configure(self, *, user_id: str | None = None, endpoint: str | None = None) -> None:
        self._sync.configure(user_id=user_id, endpoint=endpoint)

    async def aclose(self) -> None:
        await self._sync.aclose()

    # -- Health ----------------------------------------------------------------

    async def check_health(self) -> HealthReport:
        return await self._sync.check_health()

    # -- Workspaces ------------------------------------------------------------

    async def list_workspaces(self) -> list[Workspace]:
        return await self._sync.load_workspaces()

    async def create_workspace(self, name: str, repository_url: str | None = None) -> Workspace:
        return await self._sync.create_workspace(name, repository_url)

    async def delete_workspace(self, workspace_id: str) -> None:
        await self._sync.delete_workspace(workspace_id)

    async def get_workspace(self, workspace_id: str) -> Workspace:
        return await self._sync.get_workspace(workspace_id)

    # -- Sessions --------------------------------------------------------------

    async def list_sessions(self, workspace_id: str) -> list[Session]:
        return await self._sync.load_sessions(workspace_id)

    async def create_session(self, workspace_id: str, name: str) -> Session:
        return await self._sync.create_session(workspace_id, name)

    async def delete_session(self, workspace_id: str, session_id: str) -> None:
        await self._sync.delete_session(session_id)

    async def get_session(self, workspace_id: str, session_id: str) -> Session:
        session = await self._sync.get_session(session_id)
        if session.workspace_id and session.workspace_id != workspace_id:
            msg = f"Session '{session_id}' not found in workspace '{workspace_id}'"
            raise ResourceNotFoundError(msg)
        return session

    # -- Sandbox ---------------------------------------------------------------

    async def send_message(self, workspace_id: str, session_id: str, content: str) -> Message:
        message = Message(
            id=uuid4().hex,
            session_id=session_id,
            type=MessageType.USER,
            content=content,
            status=MessageStatus.SENDING,
            timestamp=datetime.now(UTC),
        )
        response = await self._sync.send_message(session_id, content)
        _check(response, "send message")
        message.mark(MessageStatus.SENT)
        return message

    async def get_messages(self, workspace_id: str, session_id: str) -> list[Message]:
        response = await self._sync.get_messages(session_id)
        data = _decode(response, "get messages")
        if isinstance(data, dict):
            data = data.get("messages")
        if not data:
            return []
        try:
            return [_message_from_payload(item, session_id) for item in data]
        except (AttributeError, TypeError, ValidationError) as exc:
            raise _malformed(response, "get messages", exc) from exc

    async def list_files(self, workspace_id: str, session_id: str) -> list[FileEntry]:
        response = await self._sync.list_files(session_id)
        data = _decode(response, "list files")
        if not data:
            return []
        try:
            return [FileEntry.model_validate(item) for item in data]
        except (TypeError, ValidationError) as exc:
            raise _malformed(response, "list files", exc) from exc

    async def read_file(self, workspace_id: str, session_id: str, file_path: str) -> FileContent:
        response = _check(await self._sync.read_file(session_id, file_path), "read file")
        return FileContent(content=response.body, language=detect_language(file_path))

    async def execute_command(self, workspace_id: str, session_id: str, command: str) -> CommandResult:
        response = await self._sync.execute_command(session_id, command)
        data = _decode(response, "execute command")
        if data is None:
            # No body means the sandbox did not report a result.
            return CommandResult(output="", exit_code=1)
        if not isinstance(data, dict):
            raise _malformed(response, "execute command", TypeError(type(data).__name__))
        try:
            exit_code = int(data.get("exitCode") or 0)
        except (TypeError, ValueError) as exc:
            raise _malformed(response, "execute command", exc) from exc
        logger.debug("Command executed in session {}: {}", session_id, command)
        return CommandResult(output=str(data.get("output") or ""), exit_code=exit_code)

    async def get_terminal_history(self, workspace_id: str, session_id: str) -> list[TerminalEntry]:
        # The sandbox API has no history endpoint.
        return []

    async def get_git_status(self, workspace_id: str, session_id: str) -> GitStatus:
        response = await self._sync.get_git_status(session_id)
        data = _decode(response, "get git status") or {}
        try:
            return GitStatus(
                status=data.get("status") or "clean",
                files=[GitFileChange.model_validate(f) for f in data.get("files") or []],
            )
        except (AttributeError, TypeError, ValidationError) as exc:
            raise _malformed(response, "get git status", exc) from exc

    # -- Conversations (legacy) ------------------------------------------------

    async def load_conversations(self) -> list[Conversation]:
        return await self._sync.load_conversations()

    async def create_conversation(self, title: str, repository_url: str | None = None) -> Conversation:
        return await self._sync.create_conversation(title, repository_url)

    async def delete_conversation(self, conversation_id: str) -> None:
        session_id = await self._sync.resolve_session_id(conversation_id)
        await self._sync.delete_conversation(session_id)

    async def get_conversation(self, conversation_id: str) -> Conversation:
        session_id = await self._sync.resolve_session_id(conversation_id)
        return await self._sync.get_conversation(session_id)
