"""Data service interface.

Everything above the facade talks to a ``DataService`` and never to the
transport directly.  Two backends implement it:

- ``RemoteDataService`` -- the live orchestrator, via ``SyncService``.
- ``FixtureDataService`` -- in-memory demo data, no network.

The backend is picked once per process (see ``create_data_service``) and
callers never check which one they hold.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Protocol, runtime_checkable

from sandboxlink.client.models import (
    CommandResult,
    Conversation,
    FileContent,
    FileEntry,
    GitStatus,
    HealthReport,
    Message,
    Session,
    TerminalEntry,
    Workspace,
)

_LANGUAGES: dict[str, str] = {
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "py": "python",
    "java": "java",
    "cpp": "cpp",
    "c": "c",
    "go": "go",
    "rs": "rust",
    "php": "php",
    "rb": "ruby",
    "md": "markdown",
    "json": "json",
    "yaml": "yaml",
    "yml": "yaml",
    "xml": "xml",
    "html": "html",
    "css": "css",
    "scss": "scss",
    "sass": "sass",
    "less": "less",
}


def detect_language(file_path: str) -> str | None:
    """Syntax language for a file, judged by its extension."""
    suffix = PurePosixPath(file_path).suffix
    return _LANGUAGES.get(suffix[1:].lower()) if suffix else None


@runtime_checkable
class DataService(Protocol):
    """Async facade over the orchestrator (or its demo stand-in).

    Lookups of unknown ids raise ``ResourceNotFoundError``.  Live backends
    additionally raise ``TransportError`` and, for sandbox calls,
    ``SandboxRequestError``.  Nothing is retried.
    """

    # -- Configuration ---------------------------------------------------------

    @property
    def current_endpoint(self) -> str:
        """Orchestrator endpoint requests are currently sent to."""
        ...

    def configure(self, *, user_id: str | None = None, endpoint: str | None = None) -> None:
        """Change identity or endpoint.  Takes effect for the next request."""
        ...

    async def aclose(self) -> None:
        """Release connections and cancel background tasks."""
        ...

    # -- Health ----------------------------------------------------------------

    async def check_health(self) -> HealthReport: ...

    # -- Workspaces ------------------------------------------------------------

    async def list_workspaces(self) -> list[Workspace]: ...

    async def create_workspace(self, name: str, repository_url: str | None = None) -> Workspace: ...

    async def delete_workspace(self, workspace_id: str) -> None: ...

    async def get_workspace(self, workspace_id: str) -> Workspace: ...

    # -- Sessions --------------------------------------------------------------

    async def list_sessions(self, workspace_id: str) -> list[Session]: ...

    async def create_session(self, workspace_id: str, name: str) -> Session: ...

    async def delete_session(self, workspace_id: str, session_id: str) -> None: ...

    async def get_session(self, workspace_id: str, session_id: str) -> Session: ...

    # -- Sandbox ---------------------------------------------------------------

    async def send_message(self, workspace_id: str, session_id: str, content: str) -> Message:
        """Send a user message.  Returns the message as recorded (status ``sent``)."""
        ...

    async def get_messages(self, workspace_id: str, session_id: str) -> list[Message]: ...

    async def list_files(self, workspace_id: str, session_id: str) -> list[FileEntry]: ...

    async def read_file(self, workspace_id: str, session_id: str, file_path: str) -> FileContent: ...

    async def execute_command(self, workspace_id: str, session_id: str, command: str) -> CommandResult: ...

    async def get_terminal_history(self, workspace_id: str, session_id: str) -> list[TerminalEntry]:
        """Commands previously run in the session, oldest first."""
        ...

    async def get_git_status(self, workspace_id: str, session_id: str) -> GitStatus: ...

    # -- Conversations (legacy) ------------------------------------------------

    async def load_conversations(self) -> list[Conversation]: ...

    async def create_conversation(self, title: str, repository_url: str | None = None) -> Conversation: ...

    async def delete_conversation(self, conversation_id: str) -> None: ...

    async def get_conversation(self, conversation_id: str) -> Conversation: ...
