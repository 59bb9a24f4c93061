"""Session, conversation and message domain models.

``Session`` is the application's view of a remote agent session.
``Conversation`` is the display projection of a session kept for the older
conversation-shaped call sites.  Both are produced by the adapter
(``sandboxlink.client.adapter``) and never hand-assembled from wire data.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from sandboxlink.client.models.enums import (
    ConnectionStatus,
    LifecycleStatus,
    MessageStatus,
    MessageType,
)

# -- Message metadata --------------------------------------------------------


class CommandInfo(BaseModel):
    name: str
    args: list[str] = Field(default_factory=list)
    exit_code: int | None = None
    output: str | None = None


class DiffChange(BaseModel):
    type: str  # add | remove | modify
    line: int
    content: str


class CodeDiff(BaseModel):
    additions: int = 0
    deletions: int = 0
    changes: list[DiffChange] = Field(default_factory=list)


class CodeInfo(BaseModel):
    language: str
    filename: str | None = None
    diff: CodeDiff | None = None


class FileInfo(BaseModel):
    name: str
    path: str
    size: int = 0
    type: str = ""
    content: str | None = None


class MessageMetadata(BaseModel):
    command: CommandInfo | None = None
    code: CodeInfo | None = None
    file: FileInfo | None = None


# -- Message -----------------------------------------------------------------

_STATUS_TRANSITIONS: dict[MessageStatus, frozenset[MessageStatus]] = {
    MessageStatus.SENDING: frozenset({MessageStatus.SENT, MessageStatus.ERROR}),
}


class Message(BaseModel):
    """A single entry in a session's append-only message history."""

    id: str
    session_id: str
    type: MessageType
    content: str
    status: MessageStatus = MessageStatus.SENT
    timestamp: datetime
    metadata: MessageMetadata | None = None

    def mark(self, status: MessageStatus) -> None:
        """Apply a delivery status transition.

        Raises ``ValueError`` for anything other than ``sending -> sent|error``.
        """
        if status == self.status:
            return
        allowed = _STATUS_TRANSITIONS.get(self.status, frozenset())
        if status not in allowed:
            msg = f"Invalid message status transition: {self.status} -> {status}"
            raise ValueError(msg)
        self.status = status


# -- Session -----------------------------------------------------------------


class Session(BaseModel):
    """A unit of agent work inside a workspace."""

    id: str
    name: str
    workspace_id: str = ""
    created_at: datetime
    updated_at: datetime
    state: LifecycleStatus = LifecycleStatus.STOPPED
    messages: list[Message] = Field(default_factory=list)
    endpoint: str | None = None
    """Internal sandbox endpoint.  Opaque; only meaningful once ``ready``."""
    ready: bool = False
    labels: dict[str, str] | None = None
    user_id: str = ""

    @property
    def proxyable(self) -> bool:
        return self.state == LifecycleStatus.RUNNING and self.ready


# -- Conversation ------------------------------------------------------------


class Conversation(BaseModel):
    """Display projection of a session."""

    id: str
    """Short id: the first eight characters of ``session_id``."""
    title: str
    created_at: datetime
    updated_at: datetime
    messages: list[Message] = Field(default_factory=list)
    session_id: str | None = None
    workspace_id: str | None = None
    sandbox_status: ConnectionStatus = ConnectionStatus.DISCONNECTED
