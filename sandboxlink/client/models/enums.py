"""Shared enumerations used across the sync client."""

from __future__ import annotations

from enum import StrEnum

# -- Connection --------------------------------------------------------------


class ConnectionStatus(StrEnum):
    """Liveness of the orchestrator or of a single session sandbox."""

    CONNECTED = "connected"
    CONNECTING = "connecting"
    DISCONNECTED = "disconnected"
    ERROR = "error"


# -- Lifecycle ---------------------------------------------------------------


class LifecycleStatus(StrEnum):
    """Coarse lifecycle of a workspace or session, as shown to the user."""

    RUNNING = "running"
    CREATING = "creating"
    STOPPED = "stopped"
    ERROR = "error"


class RemoteSessionState(StrEnum):
    """Session state enum as sent by the orchestrator."""

    UNKNOWN = "SESSION_STATE_UNKNOWN"
    CREATING = "SESSION_STATE_CREATING"
    RUNNING = "SESSION_STATE_RUNNING"
    STOPPING = "SESSION_STATE_STOPPING"
    STOPPED = "SESSION_STATE_STOPPED"
    ERROR = "SESSION_STATE_ERROR"


class RemoteWorkspaceState(StrEnum):
    """Workspace state enum as sent by the orchestrator."""

    UNKNOWN = "WORKSPACE_STATE_UNKNOWN"
    CREATING = "WORKSPACE_STATE_CREATING"
    RUNNING = "WORKSPACE_STATE_RUNNING"
    STOPPING = "WORKSPACE_STATE_STOPPING"
    STOPPED = "WORKSPACE_STATE_STOPPED"
    ERROR = "WORKSPACE_STATE_ERROR"


class ServingStatus(StrEnum):
    SERVING = "SERVING"
    NOT_SERVING = "NOT_SERVING"


# -- Messages ----------------------------------------------------------------


class MessageType(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    COMMAND = "command"
    CODE = "code"
    FILE = "file"


class MessageStatus(StrEnum):
    """Delivery status.  Only ``sending`` may transition (to ``sent`` or ``error``)."""

    SENDING = "sending"
    SENT = "sent"
    DELIVERED = "delivered"
    ERROR = "error"


# -- Sandbox results ---------------------------------------------------------


class FileKind(StrEnum):
    FILE = "file"
    DIRECTORY = "directory"


class GitFileStatus(StrEnum):
    MODIFIED = "modified"
    ADDED = "added"
    DELETED = "deleted"
    UNTRACKED = "untracked"


# -- Notifications -----------------------------------------------------------


class Severity(StrEnum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


# -- Errors ------------------------------------------------------------------


class ErrorCode(StrEnum):
    """Closed taxonomy of error kinds surfaced to consumers."""

    LOAD_WORKSPACES_FAILED = "LOAD_WORKSPACES_FAILED"
    CREATE_WORKSPACE_FAILED = "CREATE_WORKSPACE_FAILED"
    DELETE_WORKSPACE_FAILED = "DELETE_WORKSPACE_FAILED"
    LOAD_SESSIONS_FAILED = "LOAD_SESSIONS_FAILED"
    CREATE_SESSION_FAILED = "CREATE_SESSION_FAILED"
    DELETE_SESSION_FAILED = "DELETE_SESSION_FAILED"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    SERVER_ERROR = "SERVER_ERROR"
    UNKNOWN = "UNKNOWN"
