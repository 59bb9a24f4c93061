"""Sync orchestration service -- live workflows over the orchestrator.

``SyncService`` is what the live data service delegates to.  It owns the
request shapes sent to the orchestrator and the single sandbox proxy
chokepoint:

- Reads go transport -> adapter -> domain model, preserving server order.
- Writes build a wire request, send it, and re-normalize the response
  through the adapter.  A create call whose response lacks the created
  object is a failure, never a half-populated result.
- Chat, file, terminal and git operations are fixed-path calls to
  ``proxy_sandbox_request``.  Their bodies are returned uninterpreted.

Failures are logged with context and re-raised unchanged.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from loguru import logger

from sandboxlink.client import adapter
from sandboxlink.client.errors import (
    ResourceNotFoundError,
    SessionCreationFailed,
    WorkspaceCreationFailed,
)
from sandboxlink.client.models.enums import ConnectionStatus, MessageType, ServingStatus
from sandboxlink.client.models.results import HealthReport, SandboxResponse
from sandboxlink.client.models.session import Conversation, Session
from sandboxlink.client.models.wire import (
    CreateSessionRequest,
    CreateWorkspaceRequest,
    HeaderPair,
    OrchestratorWorkspaceConfig,
    ProxyHTTPRequest,
    RepositoryConfig,
    SessionConfig,
)
from sandboxlink.client.models.workspace import Workspace
from sandboxlink.client.transport import OrchestratorClient

CREATOR_LABEL = "sandboxlink"

# -- Header encoding -----------------------------------------------------------


def encode_headers(headers: Mapping[str, str] | None) -> list[HeaderPair]:
    """Flatten a header mapping to ordered key/value pairs."""
    if not headers:
        return []
    return [HeaderPair(key=key, value=value) for key, value in headers.items()]


def decode_headers(pairs: list[HeaderPair]) -> dict[str, str]:
    """Rebuild a header mapping, dropping pairs with an empty key or value."""
    return {pair.key: pair.value for pair in pairs if pair.key and pair.value}


def encode_body(body: Any) -> str | None:
    if body is None:
        return None
    if isinstance(body, str):
        return body
    return json.dumps(body)


@contextmanager
def _logged(action: str, **context: Any) -> Iterator[None]:
    """Log a failure with context, then let it propagate unchanged."""
    try:
        yield
    except Exception as exc:
        logger.error("Failed to {} {}: {}", action, context or "", exc)
        raise


class SyncService:
    """Live workflows: conversation/workspace/session CRUD and the sandbox proxy."""

    def __init__(self, client: OrchestratorClient, *, user_id: str) -> None:
        self._client = client
        self._user_id = user_id

    # -- Configuration ---------------------------------------------------------

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def endpoint(self) -> str:
        return self._client.base_url

    def configure(self, *, user_id: str | None = None, endpoint: str | None = None) -> None:
        if user_id:
            self._user_id = user_id
        if endpoint:
            self._client.update_base_url(endpoint)

    async def aclose(self) -> None:
        await self._client.aclose()

    def _labels(self, **extra: str) -> dict[str, str]:
        return {**extra, "created-by": CREATOR_LABEL, "user-id": self._user_id}

    # -- Health ----------------------------------------------------------------

    async def check_health(self) -> HealthReport:
        """Check the orchestrator.  Raises ``TransportError`` if it cannot be reached."""
        health = await self._client.check_health()
        status = ConnectionStatus.CONNECTED if health.status == ServingStatus.SERVING else ConnectionStatus.DISCONNECTED
        return HealthReport(status=status, version=health.version, details=health.details)

    # -- Conversations ---------------------------------------------------------

    async def load_conversations(self) -> list[Conversation]:
        with _logged("load conversations"):
            response = await self._client.list_sessions()
        return adapter.sessions_to_conversations(response.sessions)

    async def get_conversation(self, session_id: str) -> Conversation:
        with _logged("get conversation", session_id=session_id):
            response = await self._client.get_session(session_id)
            if response.session is None:
                msg = f"Session '{session_id}' not found"
                raise ResourceNotFoundError(msg)
        return adapter.session_to_conversation(response.session)

    async def create_conversation(self, title: str, repository_url: str | None = None) -> Conversation:
        config = None
        if repository_url:
            config = SessionConfig(repository=RepositoryConfig(url=repository_url, ref=adapter.DEFAULT_REF))
        request = CreateSessionRequest(
            name=title,
            user_id=self._user_id,
            config=config,
            labels=self._labels(),
        )
        with _logged("create conversation", title=title):
            response = await self._client.create_session(request)
            if response.session is None or not response.session.id:
                msg = "Session creation failed: no session returned"
                raise SessionCreationFailed(msg)
        logger.info("Session created: {} ({})", response.session.id, title)
        return adapter.session_to_conversation(response.session)

    async def delete_conversation(self, session_id: str) -> None:
        with _logged("delete conversation", session_id=session_id):
            await self._client.delete_session(session_id)
        logger.info("Session deleted: {}", session_id)

    # -- Workspaces ------------------------------------------------------------

    async def load_workspaces(self) -> list[Workspace]:
        with _logged("load workspaces"):
            response = await self._client.list_workspaces(self._user_id)
        return [adapter.to_workspace(w) for w in response.workspaces]

    async def get_workspace(self, workspace_id: str) -> Workspace:
        with _logged("get workspace", workspace_id=workspace_id):
            response = await self._client.get_workspace(workspace_id)
            if response.workspace is None:
                msg = f"Workspace '{workspace_id}' not found"
                raise ResourceNotFoundError(msg)
        return adapter.to_workspace(response.workspace)

    async def create_workspace(self, name: str, repository_url: str | None = None) -> Workspace:
        config = None
        if repository_url:
            config = OrchestratorWorkspaceConfig(
                repository=RepositoryConfig(url=repository_url, ref=adapter.DEFAULT_REF),
            )
        request = CreateWorkspaceRequest(name=name, user_id=self._user_id, config=config, labels=self._labels())
        with _logged("create workspace", name=name):
            response = await self._client.create_workspace(request)
            if response.workspace is None or not response.workspace.id:
                msg = "Workspace creation failed: no workspace returned"
                raise WorkspaceCreationFailed(msg)
        logger.info("Workspace created: {} ({})", response.workspace.id, name)
        return adapter.to_workspace(response.workspace)

    async def delete_workspace(self, workspace_id: str) -> None:
        with _logged("delete workspace", workspace_id=workspace_id):
            await self._client.delete_workspace(workspace_id)
        logger.info("Workspace deleted: {}", workspace_id)

    # -- Sessions --------------------------------------------------------------

    async def load_sessions(self, workspace_id: str) -> list[Session]:
        with _logged("load sessions", workspace_id=workspace_id):
            response = await self._client.list_sessions(workspace_id)
        return [adapter.to_session(s) for s in response.sessions]

    async def get_session(self, session_id: str) -> Session:
        with _logged("get session", session_id=session_id):
            response = await self._client.get_session(session_id)
            if response.session is None:
                msg = f"Session '{session_id}' not found"
                raise ResourceNotFoundError(msg)
        return adapter.to_session(response.session)

    async def create_session(self, workspace_id: str, name: str, *, session_type: str = "user-created") -> Session:
        request = CreateSessionRequest(
            name=name,
            user_id=self._user_id,
            workspace_id=workspace_id,
            config=SessionConfig(context="Interactive coding session"),
            labels=self._labels(**{"session-type": session_type}),
        )
        with _logged("create session", workspace_id=workspace_id, name=name):
            response = await self._client.create_session(request)
            if response.session is None or not response.session.id:
                msg = "Session creation failed: no session returned"
                raise SessionCreationFailed(msg)
        logger.info("Session created: {} in workspace {}", response.session.id, workspace_id)
        return adapter.to_session(response.session)

    async def delete_session(self, session_id: str) -> None:
        with _logged("delete session", session_id=session_id):
            await self._client.delete_session(session_id)
        logger.info("Session deleted: {}", session_id)

    async def resolve_session_id(self, conversation_id: str) -> str:
        """Expand a short conversation id to the full session id.

        An exact match wins; otherwise the prefix must match exactly one
        session.  Raises ``ResourceNotFoundError`` otherwise.
        """
        with _logged("resolve conversation", conversation_id=conversation_id):
            response = await self._client.list_sessions()
            session_id = adapter.resolve_conversation_id(
                conversation_id, [s.id for s in response.sessions if s.id]
            )
            if session_id is None:
                msg = f"Conversation '{conversation_id}' not found"
                raise ResourceNotFoundError(msg)
        return session_id

    # -- Sandbox proxy ---------------------------------------------------------

    async def proxy_sandbox_request(
        self,
        session_id: str,
        method: str,
        path: str,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> SandboxResponse:
        """Relay one HTTP request to the session's sandbox through the orchestrator."""
        request = ProxyHTTPRequest(
            session_id=session_id,
            method=method.upper(),
            path=path,
            headers=encode_headers(headers),
            body=encode_body(body),
            user_id=self._user_id,
        )
        with _logged("proxy sandbox request", session_id=session_id, method=request.method, path=path):
            response = await self._client.proxy_http(request)
        logger.debug("Proxy {} {} -> {}", request.method, path, response.status_code)
        return SandboxResponse(
            status_code=response.status_code,
            body=response.body or "",
            headers=decode_headers(response.headers),
        )

    async def send_message(
        self,
        session_id: str,
        content: str,
        message_type: MessageType = MessageType.USER,
    ) -> SandboxResponse:
        return await self.proxy_sandbox_request(
            session_id, "POST", "/chat/messages", {"content": content, "type": str(message_type)}
        )

    async def get_messages(self, session_id: str) -> SandboxResponse:
        return await self.proxy_sandbox_request(session_id, "GET", "/chat/messages")

    async def list_files(self, session_id: str) -> SandboxResponse:
        return await self.proxy_sandbox_request(session_id, "GET", "/files")

    async def read_file(self, session_id: str, file_path: str) -> SandboxResponse:
        separator = "" if file_path.startswith("/") else "/"
        return await self.proxy_sandbox_request(session_id, "GET", f"/files{separator}{file_path}")

    async def execute_command(self, session_id: str, command: str) -> SandboxResponse:
        return await self.proxy_sandbox_request(session_id, "POST", "/terminal/execute", {"command": command})

    async def get_git_status(self, session_id: str) -> SandboxResponse:
        return await self.proxy_sandbox_request(session_id, "GET", "/git/status")
