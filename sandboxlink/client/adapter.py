"""Orchestrator -> domain mapping.

Pure, stateless functions.  Every remote-state-to-status decision in the
package lives here; other modules call these instead of comparing wire
strings themselves.

State tables::

    remote session state   ConnectionStatus   LifecycleStatus
    ---------------------  -----------------  ---------------
    RUNNING                connected          running
    CREATING               connecting         creating
    ERROR                  error              error
    STOPPING / STOPPED     disconnected       stopped
    UNKNOWN / other / None disconnected       stopped

Display status vs. readiness: a RUNNING session whose ``status.ready`` flag
is not true is *displayed* as ``connecting``.  Readiness only ever downgrades
RUNNING; it never upgrades any other state.  Whether requests may be proxied
to the session is a separate question answered by ``is_session_ready``.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime

from sandboxlink.client.models.enums import (
    ConnectionStatus,
    LifecycleStatus,
    RemoteSessionState,
    RemoteWorkspaceState,
)
from sandboxlink.client.models.results import RepositoryInfo
from sandboxlink.client.models.session import Conversation, Session
from sandboxlink.client.models.wire import (
    OrchestratorSession,
    OrchestratorWorkspace,
    RepositoryConfig,
)
from sandboxlink.client.models.workspace import (
    RepositoryRef,
    ResourceLimits,
    Workspace,
    WorkspaceConfig,
)

DEFAULT_REF = "main"
CONVERSATION_ID_LENGTH = 8

_REPO_URL = re.compile(
    r"^(?:(?:https?|ssh|git)://)?(?:[\w.-]+@)?"
    r"(?P<host>github\.com|gitlab\.com|bitbucket\.org)[/:]"
    r"(?P<owner>[\w.-]+)/(?P<name>[\w.-]+?)(?:\.git)?/?$"
)

# ---------------------------------------------------------------------------
# State tables
# ---------------------------------------------------------------------------

_SESSION_CONNECTION: dict[str, ConnectionStatus] = {
    RemoteSessionState.RUNNING: ConnectionStatus.CONNECTED,
    RemoteSessionState.CREATING: ConnectionStatus.CONNECTING,
    RemoteSessionState.ERROR: ConnectionStatus.ERROR,
}

_SESSION_LIFECYCLE: dict[str, LifecycleStatus] = {
    RemoteSessionState.RUNNING: LifecycleStatus.RUNNING,
    RemoteSessionState.CREATING: LifecycleStatus.CREATING,
    RemoteSessionState.ERROR: LifecycleStatus.ERROR,
}

_WORKSPACE_LIFECYCLE: dict[str, LifecycleStatus] = {
    RemoteWorkspaceState.RUNNING: LifecycleStatus.RUNNING,
    RemoteWorkspaceState.CREATING: LifecycleStatus.CREATING,
    RemoteWorkspaceState.ERROR: LifecycleStatus.ERROR,
}


def map_session_state(state: str | None) -> ConnectionStatus:
    """Map a remote session state to a ``ConnectionStatus``.  Total over all inputs."""
    if state is None:
        return ConnectionStatus.DISCONNECTED
    return _SESSION_CONNECTION.get(state, ConnectionStatus.DISCONNECTED)


def map_session_lifecycle(state: str | None) -> LifecycleStatus:
    if state is None:
        return LifecycleStatus.STOPPED
    return _SESSION_LIFECYCLE.get(state, LifecycleStatus.STOPPED)


def map_workspace_lifecycle(state: str | None) -> LifecycleStatus:
    if state is None:
        return LifecycleStatus.STOPPED
    return _WORKSPACE_LIFECYCLE.get(state, LifecycleStatus.STOPPED)


def session_display_status(session: OrchestratorSession) -> ConnectionStatus:
    """Status shown for a session: the state table, with RUNNING-but-not-ready as ``connecting``."""
    status = map_session_state(session.state)
    if status == ConnectionStatus.CONNECTED and not is_session_ready(session):
        return ConnectionStatus.CONNECTING
    return status


_LIFECYCLE_REMOTE: dict[str, RemoteSessionState] = {
    LifecycleStatus.RUNNING: RemoteSessionState.RUNNING,
    LifecycleStatus.CREATING: RemoteSessionState.CREATING,
    LifecycleStatus.STOPPED: RemoteSessionState.STOPPED,
    LifecycleStatus.ERROR: RemoteSessionState.ERROR,
}


def session_connection_status(session: Session) -> ConnectionStatus:
    """``session_display_status`` for an already adapted ``Session``.

    Goes through the same state table, so both views of a session agree.
    """
    status = map_session_state(_LIFECYCLE_REMOTE.get(session.state))
    if status == ConnectionStatus.CONNECTED and not session.ready:
        return ConnectionStatus.CONNECTING
    return status


# ---------------------------------------------------------------------------
# Readiness and endpoints
# ---------------------------------------------------------------------------


def is_session_ready(session: OrchestratorSession) -> bool:
    """True iff the session is RUNNING and explicitly flagged ready."""
    return session.state == RemoteSessionState.RUNNING and session.status is not None and session.status.ready is True


def get_session_endpoint(session: OrchestratorSession) -> str | None:
    """Internal sandbox endpoint, or ``None`` while the session is not yet proxyable."""
    if session.status is None:
        return None
    return session.status.internal_endpoint or None


def is_workspace_ready(workspace: OrchestratorWorkspace) -> bool:
    return (
        workspace.state == RemoteWorkspaceState.RUNNING
        and workspace.status is not None
        and workspace.status.ready is True
    )


def get_workspace_endpoint(workspace: OrchestratorWorkspace) -> str | None:
    if workspace.status is None:
        return None
    return workspace.status.internal_endpoint or None


# ---------------------------------------------------------------------------
# Repository references
# ---------------------------------------------------------------------------


def parse_repository_url(url: str, ref: str | None = None) -> RepositoryInfo:
    """Extract owner/name from a repository URL on a known host.

    Falls back to ``{url, ref}`` for anything unrecognised.  Never raises.
    """
    info = RepositoryInfo(url=url, ref=ref or DEFAULT_REF)
    match = _REPO_URL.match(url.strip())
    if match:
        info.owner = match.group("owner")
        info.name = match.group("name")
    return info


def repository_info(remote: OrchestratorSession | OrchestratorWorkspace) -> RepositoryInfo | None:
    """Repository reference from a session or workspace config, if any."""
    repo = remote.config.repository if remote.config else None
    if repo is None or not repo.url:
        return None
    return parse_repository_url(repo.url, repo.ref)


def _repository_ref(repo: RepositoryConfig | None) -> RepositoryRef | None:
    if repo is None or not repo.url:
        return None
    return RepositoryRef(url=repo.url, ref=repo.ref)


# ---------------------------------------------------------------------------
# Entity mapping
# ---------------------------------------------------------------------------


def _timestamp(epoch_seconds: float | None) -> datetime:
    if not epoch_seconds:
        return datetime.now(UTC)
    return datetime.fromtimestamp(epoch_seconds, tz=UTC)


def session_to_conversation(session: OrchestratorSession) -> Conversation:
    short_id = session.id[:CONVERSATION_ID_LENGTH] if session.id else ""
    return Conversation(
        id=short_id,
        title=session.name or f"Session {short_id}",
        created_at=_timestamp(session.created_at),
        updated_at=_timestamp(session.updated_at),
        messages=[],
        session_id=session.id,
        workspace_id=session.workspace_id,
        sandbox_status=session_display_status(session),
    )


def sessions_to_conversations(sessions: list[OrchestratorSession]) -> list[Conversation]:
    """Adapt sessions in the order received."""
    return [session_to_conversation(s) for s in sessions]


def resolve_conversation_id(conversation_id: str, session_ids: list[str]) -> str | None:
    """Full session id for a conversation id, or ``None``.

    An exact match wins; otherwise the prefix must match exactly one session.
    """
    if conversation_id in session_ids:
        return conversation_id
    if not conversation_id:
        return None
    matches = [sid for sid in session_ids if sid.startswith(conversation_id)]
    return matches[0] if len(matches) == 1 else None


def to_session(session: OrchestratorSession) -> Session:
    return Session(
        id=session.id or "",
        name=session.name or "Unnamed Session",
        workspace_id=session.workspace_id or "",
        created_at=_timestamp(session.created_at),
        updated_at=_timestamp(session.updated_at),
        state=map_session_lifecycle(session.state),
        endpoint=get_session_endpoint(session),
        ready=is_session_ready(session),
        labels=session.labels,
        user_id=session.user_id or "",
    )


def to_workspace(workspace: OrchestratorWorkspace) -> Workspace:
    """Adapt a workspace.

    Status comes from ``state`` when the orchestrator sends one; older
    orchestrators only report ``status.ready``, which maps to running/stopped.
    """
    if workspace.state is not None:
        status = map_workspace_lifecycle(workspace.state)
    elif workspace.status is not None and workspace.status.ready:
        status = LifecycleStatus.RUNNING
    else:
        status = LifecycleStatus.STOPPED

    config = WorkspaceConfig()
    if workspace.config is not None:
        resources = workspace.config.resources
        config = WorkspaceConfig(
            repository=_repository_ref(workspace.config.repository),
            environment=workspace.config.environment,
            resources=ResourceLimits(**resources.model_dump()) if resources else None,
        )

    return Workspace(
        id=workspace.id or "",
        name=workspace.name or "Unnamed Workspace",
        created_at=_timestamp(workspace.created_at),
        updated_at=_timestamp(workspace.updated_at),
        status=status,
        config=config,
        labels=workspace.labels,
        user_id=workspace.user_id or "",
    )


# ---------------------------------------------------------------------------
# Status messages
# ---------------------------------------------------------------------------

_SESSION_MESSAGES: dict[str, str] = {
    RemoteSessionState.RUNNING: "Sandbox Running",
    RemoteSessionState.CREATING: "Starting Sandbox...",
    RemoteSessionState.ERROR: "Sandbox Error",
    RemoteSessionState.STOPPED: "Sandbox Stopped",
    RemoteSessionState.STOPPING: "Stopping Sandbox...",
}

_WORKSPACE_MESSAGES: dict[str, str] = {
    RemoteWorkspaceState.RUNNING: "Workspace Running",
    RemoteWorkspaceState.CREATING: "Starting Workspace...",
    RemoteWorkspaceState.ERROR: "Workspace Error",
    RemoteWorkspaceState.STOPPED: "Workspace Stopped",
    RemoteWorkspaceState.STOPPING: "Stopping Workspace...",
}


def session_status_message(state: str | None, ready: bool | None = None) -> str:
    if ready:
        return "Sandbox Ready"
    return _SESSION_MESSAGES.get(state or "", "Sandbox Status Unknown")


def workspace_status_message(state: str | None, ready: bool | None = None) -> str:
    if ready:
        return "Workspace Ready"
    return _WORKSPACE_MESSAGES.get(state or "", "Workspace Status Unknown")
