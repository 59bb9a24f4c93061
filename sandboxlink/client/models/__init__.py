"""Data models for the sync client."""

from sandboxlink.client.models.enums import (
    ConnectionStatus,
    ErrorCode,
    FileKind,
    GitFileStatus,
    LifecycleStatus,
    MessageStatus,
    MessageType,
    RemoteSessionState,
    RemoteWorkspaceState,
    ServingStatus,
    Severity,
)
from sandboxlink.client.models.error import APIError
from sandboxlink.client.models.notification import Notification
from sandboxlink.client.models.results import (
    CommandResult,
    FileContent,
    FileEntry,
    GitFileChange,
    GitStatus,
    HealthReport,
    RepositoryInfo,
    SandboxResponse,
    SessionHealth,
    TerminalEntry,
)
from sandboxlink.client.models.session import (
    CodeDiff,
    CodeInfo,
    CommandInfo,
    Conversation,
    DiffChange,
    FileInfo,
    Message,
    MessageMetadata,
    Session,
)
from sandboxlink.client.models.workspace import (
    RepositoryRef,
    ResourceLimits,
    Workspace,
    WorkspaceConfig,
)

__all__ = [
    # Errors
    "APIError",
    "CodeDiff",
    "CodeInfo",
    "CommandInfo",
    # Results
    "CommandResult",
    # Enums
    "ConnectionStatus",
    # Session
    "Conversation",
    "DiffChange",
    "ErrorCode",
    "FileContent",
    "FileEntry",
    "FileInfo",
    "FileKind",
    "GitFileChange",
    "GitFileStatus",
    "GitStatus",
    "HealthReport",
    "LifecycleStatus",
    "Message",
    "MessageMetadata",
    "MessageStatus",
    "MessageType",
    # Notifications
    "Notification",
    "RemoteSessionState",
    "RemoteWorkspaceState",
    "RepositoryInfo",
    # Workspace
    "RepositoryRef",
    "ResourceLimits",
    "SandboxResponse",
    "ServingStatus",
    "Session",
    "SessionHealth",
    "Severity",
    "TerminalEntry",
    "Workspace",
    "WorkspaceConfig",
]
