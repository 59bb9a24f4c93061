"""Consumer-side workspace and session state.

``WorkspaceStore`` is what a UI or CLI holds on to: the loaded workspaces,
the sessions of the active workspace, which ones are selected, a loading
flag and the last error.  Its async operations call the data service and
never raise; a failure is stored in ``error`` as an ``APIError`` carrying
the operation's code.

Connection status is not tracked here; ``HealthMonitor`` owns it.
"""

from __future__ import annotations

from collections.abc import Awaitable
from datetime import UTC, datetime
from typing import TypeVar
from uuid import uuid4

from loguru import logger

from sandboxlink.client.errors import to_api_error
from sandboxlink.client.models import APIError, ErrorCode, LifecycleStatus, Session, Workspace
from sandboxlink.client.services.base import DataService

T = TypeVar("T")

PLACEHOLDER_PREFIX = "pending-"


class WorkspaceStore:
    def __init__(self, service: DataService) -> None:
        self._service = service
        self.workspaces: list[Workspace] = []
        self.sessions: list[Session] = []
        self.active_workspace_id: str | None = None
        self.active_session_id: str | None = None
        self.is_loading = False
        self.error: APIError | None = None

    # -- Selection -------------------------------------------------------------

    @property
    def active_workspace(self) -> Workspace | None:
        return next((w for w in self.workspaces if w.id == self.active_workspace_id), None)

    @property
    def active_session(self) -> Session | None:
        return next((s for s in self.sessions if s.id == self.active_session_id), None)

    def set_active_workspace(self, workspace_id: str | None) -> None:
        """Switch workspace.  Sessions of the previous workspace are dropped."""
        self.active_workspace_id = workspace_id
        self.active_session_id = None
        self.sessions = []

    def set_active_session(self, session_id: str | None) -> None:
        self.active_session_id = session_id

    def clear_error(self) -> None:
        self.error = None

    # -- Plumbing --------------------------------------------------------------

    async def _run(self, code: ErrorCode, action: Awaitable[T]) -> tuple[bool, T | None]:
        self.is_loading = True
        self.error = None
        try:
            result = await action
        except Exception as exc:
            logger.error("{}: {}", code, exc)
            self.error = to_api_error(exc, code)
            return False, None
        finally:
            self.is_loading = False
        return True, result

    # -- Workspaces ------------------------------------------------------------

    async def load_workspaces(self) -> None:
        ok, workspaces = await self._run(ErrorCode.LOAD_WORKSPACES_FAILED, self._service.list_workspaces())
        if ok:
            self.workspaces = workspaces or []

    async def create_workspace(self, name: str, repository_url: str | None = None) -> Workspace | None:
        """Create a workspace, showing a ``creating`` placeholder until the orchestrator confirms."""
        now = datetime.now(UTC)
        placeholder = Workspace(
            id=f"{PLACEHOLDER_PREFIX}{uuid4().hex[:8]}",
            name=name,
            created_at=now,
            updated_at=now,
            status=LifecycleStatus.CREATING,
        )
        self.workspaces.insert(0, placeholder)

        ok, workspace = await self._run(
            ErrorCode.CREATE_WORKSPACE_FAILED,
            self._service.create_workspace(name, repository_url),
        )
        index = next((i for i, w in enumerate(self.workspaces) if w.id == placeholder.id), None)
        if not ok or workspace is None:
            if index is not None:
                del self.workspaces[index]
            return None

        duplicate = any(w.id == workspace.id for w in self.workspaces)
        if index is not None and not duplicate:
            self.workspaces[index] = workspace
        elif index is not None:
            del self.workspaces[index]
        elif not duplicate:
            self.workspaces.insert(0, workspace)
        self.active_workspace_id = workspace.id
        return workspace

    async def delete_workspace(self, workspace_id: str) -> bool:
        ok, _ = await self._run(ErrorCode.DELETE_WORKSPACE_FAILED, self._service.delete_workspace(workspace_id))
        if not ok:
            return False
        self.workspaces = [w for w in self.workspaces if w.id != workspace_id]
        if self.active_workspace_id == workspace_id:
            self.active_workspace_id = self.workspaces[0].id if self.workspaces else None
            self.sessions = []
            self.active_session_id = None
        return True

    # -- Sessions --------------------------------------------------------------

    async def load_sessions(self, workspace_id: str) -> None:
        ok, sessions = await self._run(ErrorCode.LOAD_SESSIONS_FAILED, self._service.list_sessions(workspace_id))
        if ok:
            self.sessions = sessions or []

    async def create_session(self, workspace_id: str, name: str) -> Session | None:
        ok, session = await self._run(
            ErrorCode.CREATE_SESSION_FAILED,
            self._service.create_session(workspace_id, name),
        )
        if not ok or session is None:
            return None
        if not any(s.id == session.id for s in self.sessions):
            self.sessions.insert(0, session)
        self.active_session_id = session.id
        return session

    async def delete_session(self, workspace_id: str, session_id: str) -> bool:
        ok, _ = await self._run(
            ErrorCode.DELETE_SESSION_FAILED,
            self._service.delete_session(workspace_id, session_id),
        )
        if not ok:
            return False
        self.sessions = [s for s in self.sessions if s.id != session_id]
        if self.active_session_id == session_id:
            self.active_session_id = self.sessions[0].id if self.sessions else None
        return True
