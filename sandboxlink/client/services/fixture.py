"""In-memory demo backend.

Serves a fixed set of workspaces, sessions and messages without touching the
network, so the client can be exercised end to end in demo mode.  Some
behaviour of a real sandbox is simulated with background tasks:

- New sessions and workspaces start out ``creating`` and switch to running
  after ``startup_delay`` seconds.
- Every user message gets a canned assistant reply after a random delay
  drawn from ``reply_delay``.

Seed data can be replaced with a JSON file (``SANDBOXLINK_FIXTURE_PATH``)
holding ``{"workspaces": [...], "sessions": [...]}`` in the domain model
shape.  The file is read off the event loop on first use.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Coroutine
from datetime import UTC, datetime, timedelta
from functools import partial
from pathlib import Path
from typing import Any
from uuid import uuid4

from anyio import to_thread
from loguru import logger
from pydantic import BaseModel, Field

from sandboxlink.client import adapter
from sandboxlink.client.errors import ResourceNotFoundError
from sandboxlink.client.models import (
    CommandInfo,
    CommandResult,
    ConnectionStatus,
    Conversation,
    FileContent,
    FileEntry,
    FileKind,
    GitFileChange,
    GitFileStatus,
    GitStatus,
    HealthReport,
    LifecycleStatus,
    Message,
    MessageMetadata,
    MessageStatus,
    MessageType,
    RepositoryRef,
    Session,
    TerminalEntry,
    Workspace,
    WorkspaceConfig,
)
from sandboxlink.client.services.base import detect_language

DEMO_ENDPOINT = "demo://localhost"
DEMO_VERSION = "demo-1.0.0"
DEMO_WORKSPACE_ID = "demo-workspace"

_REPLIES = (
    "I'll help you with that! Let me analyze your request and provide a solution.",
    "Great question! Here's what I recommend based on your requirements.",
    "I understand what you're looking for. Let me implement that for you.",
    "That's an interesting challenge. Here's my approach to solve it.",
    "I can definitely help with that. Let me show you how to implement this.",
)

_FILES = (
    FileEntry(path="/src", type=FileKind.DIRECTORY),
    FileEntry(path="/src/App.tsx"),
    FileEntry(path="/src/index.tsx"),
    FileEntry(path="/src/components", type=FileKind.DIRECTORY),
    FileEntry(path="/src/components/Header.tsx"),
    FileEntry(path="/package.json"),
    FileEntry(path="/README.md"),
    FileEntry(path="/tsconfig.json"),
)


class FixtureSeed(BaseModel):
    """Initial demo data."""

    workspaces: list[Workspace] = Field(default_factory=list)
    sessions: list[Session] = Field(default_factory=list)
    terminal: dict[str, list[TerminalEntry]] = Field(default_factory=dict)
    """Terminal history keyed by session id."""


def default_seed(now: datetime | None = None) -> FixtureSeed:
    now = now or datetime.now(UTC)
    hour_ago = now - timedelta(hours=1)
    two_days_ago = now - timedelta(days=2)

    workspace = Workspace(
        id=DEMO_WORKSPACE_ID,
        name="Demo Workspace",
        created_at=two_days_ago,
        updated_at=now,
        status=LifecycleStatus.RUNNING,
        config=WorkspaceConfig(repository=RepositoryRef(url="https://github.com/example/demo-app", ref="main")),
    )

    def message(session_id: str, msg_id: str, type_: MessageType, content: str, at: datetime, **kw: Any) -> Message:
        return Message(id=msg_id, session_id=session_id, type=type_, content=content, timestamp=at, **kw)

    sessions = [
        Session(
            id="demo0001",
            name="React App Development",
            workspace_id=DEMO_WORKSPACE_ID,
            created_at=two_days_ago,
            updated_at=hour_ago,
            state=LifecycleStatus.RUNNING,
            ready=True,
            messages=[
                message("demo0001", "m1", MessageType.USER, "Help me create a React app with TypeScript", two_days_ago),
                message(
                    "demo0001",
                    "m2",
                    MessageType.ASSISTANT,
                    "I'll help you create a React app with TypeScript. "
                    "Let me start by setting up the project structure.",
                    two_days_ago + timedelta(minutes=5),
                ),
                message(
                    "demo0001",
                    "m3",
                    MessageType.COMMAND,
                    "npx create-react-app my-app --template typescript",
                    two_days_ago + timedelta(minutes=10),
                    metadata=MessageMetadata(
                        command=CommandInfo(
                            name="npx",
                            args=["create-react-app", "my-app", "--template", "typescript"],
                            exit_code=0,
                            output="Successfully created React app with TypeScript!",
                        )
                    ),
                ),
            ],
        ),
        Session(
            id="demo0002",
            name="API Integration",
            workspace_id=DEMO_WORKSPACE_ID,
            created_at=hour_ago,
            updated_at=now,
            state=LifecycleStatus.CREATING,
            messages=[
                message("demo0002", "m4", MessageType.USER, "How do I integrate with a REST API?", hour_ago),
                message(
                    "demo0002",
                    "m5",
                    MessageType.ASSISTANT,
                    "I'll show you how to integrate with a REST API using fetch and async/await.",
                    hour_ago + timedelta(minutes=2),
                ),
            ],
        ),
        Session(
            id="demo0003",
            name="Database Design",
            workspace_id=DEMO_WORKSPACE_ID,
            created_at=now,
            updated_at=now,
            state=LifecycleStatus.STOPPED,
        ),
    ]
    terminal = {
        "demo0001": [
            TerminalEntry(
                command="npm install",
                output="added 1337 packages in 5.2s",
                timestamp=now - timedelta(minutes=1),
            ),
            TerminalEntry(
                command="npm run build",
                output="Successfully compiled!",
                timestamp=now - timedelta(seconds=30),
            ),
        ]
    }
    return FixtureSeed(workspaces=[workspace], sessions=sessions, terminal=terminal)


def _to_conversation(session: Session) -> Conversation:
    return Conversation(
        id=session.id[: adapter.CONVERSATION_ID_LENGTH],
        title=session.name,
        created_at=session.created_at,
        updated_at=session.updated_at,
        messages=[m.model_copy() for m in session.messages],
        session_id=session.id,
        workspace_id=session.workspace_id or None,
        sandbox_status=adapter.session_connection_status(session),
    )


def _file_content(file_path: str) -> str:
    if file_path.endswith((".tsx", ".ts")):
        return (
            "import React from 'react';\n\nfunction Component() {\n"
            "  return <div>Hello World</div>;\n}\n\nexport default Component;"
        )
    if file_path.endswith(".json"):
        return '{\n  "name": "my-app",\n  "version": "1.0.0",\n  "dependencies": {\n    "react": "^18.0.0"\n  }\n}'
    if file_path.endswith(".md"):
        return "# My Project\n\nThis is a demo project."
    return f"// Content for {file_path}\nconsole.log('Hello from {file_path}');"


def _command_output(command: str) -> str:
    if "npm" in command:
        return "npm command executed successfully\npackages installed: 42\ntime: 2.3s"
    if "git" in command:
        return "On branch main\nYour branch is up to date with origin/main"
    if "ls" in command:
        return "src/\npackage.json\nREADME.md\ntsconfig.json"
    return f'Command "{command}" executed successfully'


class FixtureDataService:
    """``DataService`` implementation serving demo data from memory."""

    def __init__(
        self,
        *,
        fixture_path: str | Path | None = None,
        latency: float = 0.0,
        user_id: str = "default-user",
        startup_delay: float = 2.0,
        reply_delay: tuple[float, float] = (1.0, 3.0),
    ) -> None:
        self._fixture_path = Path(fixture_path) if fixture_path else None
        self._latency = latency
        self._user_id = user_id
        self._startup_delay = startup_delay
        self._reply_delay = reply_delay
        self._workspaces: dict[str, Workspace] = {}
        self._sessions: dict[str, Session] = {}
        self._terminal: dict[str, list[TerminalEntry]] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self._loaded = False
        if self._fixture_path is None:
            self._apply(default_seed())

    # -- Seeding ---------------------------------------------------------------

    def _apply(self, seed: FixtureSeed) -> None:
        self._workspaces = {w.id: w for w in seed.workspaces}
        self._sessions = {s.id: s for s in seed.sessions}
        self._terminal = {sid: list(entries) for sid, entries in seed.terminal.items()}
        self._loaded = True

    async def _ensure_loaded(self) -> None:
        if self._loaded or self._fixture_path is None:
            return
        raw = await to_thread.run_sync(partial(self._fixture_path.read_text, encoding="utf-8"))
        self._apply(FixtureSeed.model_validate_json(raw))
        logger.info(
            "Demo fixtures loaded from {} ({} workspaces, {} sessions)",
            self._fixture_path,
            len(self._workspaces),
            len(self._sessions),
        )

    async def _pause(self) -> None:
        if self._latency > 0:
            await asyncio.sleep(self._latency)
        await self._ensure_loaded()

    # -- Background simulation -------------------------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _start_session(self, session_id: str) -> None:
        await asyncio.sleep(self._startup_delay)
        session = self._sessions.get(session_id)
        if session is None:
            return
        session.state = LifecycleStatus.RUNNING
        session.ready = True
        session.updated_at = datetime.now(UTC)
        logger.debug("Demo session {} is now running", session_id)

    async def _start_workspace(self, workspace_id: str) -> None:
        await asyncio.sleep(self._startup_delay)
        workspace = self._workspaces.get(workspace_id)
        if workspace is not None:
            workspace.status = LifecycleStatus.RUNNING
            workspace.updated_at = datetime.now(UTC)

    async def _reply(self, session_id: str) -> None:
        await asyncio.sleep(random.uniform(*self._reply_delay))  # noqa: S311
        session = self._sessions.get(session_id)
        if session is None:
            return
        now = datetime.now(UTC)
        session.messages.append(
            Message(
                id=f"msg_{uuid4().hex[:12]}",
                session_id=session_id,
                type=MessageType.ASSISTANT,
                content=random.choice(_REPLIES),  # noqa: S311
                timestamp=now,
            )
        )
        session.updated_at = now

    # -- Lookup ----------------------------------------------------------------

    def _workspace(self, workspace_id: str) -> Workspace:
        workspace = self._workspaces.get(workspace_id)
        if workspace is None:
            msg = f"Workspace '{workspace_id}' not found"
            raise ResourceNotFoundError(msg)
        return workspace

    def _session(self, workspace_id: str, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None or session.workspace_id != workspace_id:
            msg = f"Session '{session_id}' not found in workspace '{workspace_id}'"
            raise ResourceNotFoundError(msg)
        return session

    def _conversation_session(self, conversation_id: str) -> Session:
        session_id = adapter.resolve_conversation_id(conversation_id, list(self._sessions))
        if session_id is None:
            msg = f"Conversation '{conversation_id}' not found"
            raise ResourceNotFoundError(msg)
        return self._sessions[session_id]

    def _new_session(self, workspace_id: str, name: str) -> Session:
        now = datetime.now(UTC)
        session = Session(
            id=uuid4().hex,
            name=name,
            workspace_id=workspace_id,
            created_at=now,
            updated_at=now,
            state=LifecycleStatus.CREATING,
            user_id=self._user_id,
        )
        # Newest first, like the orchestrator's listing.
        self._sessions = {session.id: session, **self._sessions}
        self._spawn(self._start_session(session.id))
        return session

    # -- Configuration ---------------------------------------------------------

    @property
    def current_endpoint(self) -> str:
        return DEMO_ENDPOINT

    def configure(self, *, user_id: str | None = None, endpoint: str | None = None) -> None:
        if user_id:
            self._user_id = user_id
        if endpoint:
            logger.debug("Demo mode ignores endpoint change to {}", endpoint)

    async def aclose(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    # -- Health ----------------------------------------------------------------

    async def check_health(self) -> HealthReport:
        await self._pause()
        return HealthReport(status=ConnectionStatus.CONNECTED, version=DEMO_VERSION)

    # -- Workspaces ------------------------------------------------------------

    async def list_workspaces(self) -> list[Workspace]:
        await self._pause()
        return [w.model_copy(deep=True) for w in self._workspaces.values()]

    async def create_workspace(self, name: str, repository_url: str | None = None) -> Workspace:
        await self._pause()
        now = datetime.now(UTC)
        config = WorkspaceConfig()
        if repository_url:
            config = WorkspaceConfig(repository=RepositoryRef(url=repository_url, ref=adapter.DEFAULT_REF))
        workspace = Workspace(
            id=f"ws-{uuid4().hex[:8]}",
            name=name,
            created_at=now,
            updated_at=now,
            status=LifecycleStatus.CREATING,
            config=config,
            user_id=self._user_id,
        )
        self._workspaces[workspace.id] = workspace
        self._spawn(self._start_workspace(workspace.id))
        return workspace.model_copy(deep=True)

    async def delete_workspace(self, workspace_id: str) -> None:
        await self._pause()
        self._workspaces.pop(workspace_id, None)
        self._sessions = {sid: s for sid, s in self._sessions.items() if s.workspace_id != workspace_id}

    async def get_workspace(self, workspace_id: str) -> Workspace:
        await self._pause()
        return self._workspace(workspace_id).model_copy(deep=True)

    # -- Sessions --------------------------------------------------------------

    async def list_sessions(self, workspace_id: str) -> list[Session]:
        await self._pause()
        return [s.model_copy(deep=True) for s in self._sessions.values() if s.workspace_id == workspace_id]

    async def create_session(self, workspace_id: str, name: str) -> Session:
        await self._pause()
        self._workspace(workspace_id)
        return self._new_session(workspace_id, name).model_copy(deep=True)

    async def delete_session(self, workspace_id: str, session_id: str) -> None:
        await self._pause()
        session = self._sessions.get(session_id)
        if session is not None and session.workspace_id == workspace_id:
            del self._sessions[session_id]

    async def get_session(self, workspace_id: str, session_id: str) -> Session:
        await self._pause()
        return self._session(workspace_id, session_id).model_copy(deep=True)

    # -- Sandbox ---------------------------------------------------------------

    async def send_message(self, workspace_id: str, session_id: str, content: str) -> Message:
        await self._pause()
        session = self._session(workspace_id, session_id)
        message = Message(
            id=f"msg_{uuid4().hex[:12]}",
            session_id=session_id,
            type=MessageType.USER,
            content=content,
            status=MessageStatus.SENDING,
            timestamp=datetime.now(UTC),
        )
        message.mark(MessageStatus.SENT)
        session.messages.append(message)
        session.updated_at = message.timestamp
        self._spawn(self._reply(session_id))
        return message.model_copy()

    async def get_messages(self, workspace_id: str, session_id: str) -> list[Message]:
        await self._pause()
        return [m.model_copy() for m in self._session(workspace_id, session_id).messages]

    async def list_files(self, workspace_id: str, session_id: str) -> list[FileEntry]:
        await self._pause()
        self._session(workspace_id, session_id)
        return [f.model_copy() for f in _FILES]

    async def read_file(self, workspace_id: str, session_id: str, file_path: str) -> FileContent:
        await self._pause()
        self._session(workspace_id, session_id)
        return FileContent(content=_file_content(file_path), language=detect_language(file_path))

    async def execute_command(self, workspace_id: str, session_id: str, command: str) -> CommandResult:
        await self._pause()
        self._session(workspace_id, session_id)
        output = _command_output(command)
        self._terminal.setdefault(session_id, []).append(
            TerminalEntry(command=command, output=output, timestamp=datetime.now(UTC))
        )
        return CommandResult(output=output, exit_code=0)

    async def get_terminal_history(self, workspace_id: str, session_id: str) -> list[TerminalEntry]:
        await self._pause()
        self._session(workspace_id, session_id)
        return [e.model_copy() for e in self._terminal.get(session_id, [])]

    async def get_git_status(self, workspace_id: str, session_id: str) -> GitStatus:
        await self._pause()
        self._session(workspace_id, session_id)
        return GitStatus(
            status="dirty",
            files=[
                GitFileChange(path="src/App.tsx", status=GitFileStatus.MODIFIED),
                GitFileChange(path="src/components/NewComponent.tsx", status=GitFileStatus.ADDED),
                GitFileChange(path="README.md", status=GitFileStatus.MODIFIED),
            ],
        )

    # -- Conversations (legacy) ------------------------------------------------

    async def load_conversations(self) -> list[Conversation]:
        await self._pause()
        return [_to_conversation(s) for s in self._sessions.values()]

    async def create_conversation(self, title: str, repository_url: str | None = None) -> Conversation:
        await self._pause()
        if repository_url:
            logger.debug("Demo conversation '{}' ignores repository {}", title, repository_url)
        return _to_conversation(self._new_session(DEMO_WORKSPACE_ID, title))

    async def delete_conversation(self, conversation_id: str) -> None:
        await self._pause()
        session_id = adapter.resolve_conversation_id(conversation_id, list(self._sessions))
        if session_id is not None:
            del self._sessions[session_id]

    async def get_conversation(self, conversation_id: str) -> Conversation:
        await self._pause()
        return _to_conversation(self._conversation_session(conversation_id))
