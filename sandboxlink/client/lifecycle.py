"""Automatic session management for workspaces.

``ensure_active_session`` guarantees a workspace has a session to talk to,
preferring (in order) the cached auto session, any ready session, a session
that is still starting, and finally a newly created one.  Sessions that are
not ready yet are polled in the background until they become ready, fail,
or run out of attempts.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from loguru import logger

from sandboxlink.client.models import LifecycleStatus, Session, SessionHealth, Workspace
from sandboxlink.client.services.base import DataService
from sandboxlink.client.settings import SandboxSettings

_STATUS_MESSAGES: dict[str, str] = {
    LifecycleStatus.RUNNING: "Session is ready and active",
    LifecycleStatus.CREATING: "Session is starting up...",
    LifecycleStatus.STOPPED: "Session is stopped",
    LifecycleStatus.ERROR: "Session encountered an error",
}


def health_message(state: str) -> str:
    return _STATUS_MESSAGES.get(state, "Session status unknown")


class SessionLifecycleManager:
    def __init__(
        self,
        service: DataService,
        *,
        poll_interval: float = 10.0,
        max_attempts: int = 30,
    ) -> None:
        self._service = service
        self._poll_interval = poll_interval
        self._max_attempts = max_attempts
        self._auto_sessions: dict[str, str] = {}  # workspace_id -> session_id
        self._monitors: dict[tuple[str, str], asyncio.Task[None]] = {}

    @classmethod
    def from_settings(cls, service: DataService, settings: SandboxSettings) -> SessionLifecycleManager:
        return cls(
            service,
            poll_interval=settings.session_poll_interval,
            max_attempts=settings.session_poll_attempts,
        )

    def cached_session_id(self, workspace_id: str) -> str | None:
        return self._auto_sessions.get(workspace_id)

    def is_monitoring(self, workspace_id: str, session_id: str) -> bool:
        task = self._monitors.get((workspace_id, session_id))
        return task is not None and not task.done()

    # -- Ensure ----------------------------------------------------------------

    async def ensure_active_session(self, workspace: Workspace) -> Session:
        """Return a usable session for *workspace*, creating one if needed.

        The returned session may still be starting; it is then monitored in
        the background.  Errors from the data service propagate.
        """
        cached_id = self._auto_sessions.get(workspace.id)
        if cached_id:
            try:
                session = await self._service.get_session(workspace.id, cached_id)
            except Exception as exc:
                logger.debug("Cached session {} unavailable: {}", cached_id, exc)
                self._auto_sessions.pop(workspace.id, None)
            else:
                if session.proxyable:
                    return session

        try:
            sessions = await self._service.list_sessions(workspace.id)
            ready = next((s for s in sessions if s.proxyable), None)
            if ready is not None:
                self._auto_sessions[workspace.id] = ready.id
                return ready

            starting = next((s for s in sessions if s.state == LifecycleStatus.CREATING), None)
            if starting is not None:
                self._monitor(workspace.id, starting.id)
                return starting

            name = f"Auto Session - {datetime.now(UTC):%Y-%m-%d %H:%M:%S}"
            session = await self._service.create_session(workspace.id, name)
        except Exception:
            logger.exception("Failed to ensure active session for workspace {}", workspace.id)
            raise

        logger.info("Created auto session {} for workspace {}", session.id, workspace.id)
        self._auto_sessions[workspace.id] = session.id
        if not session.proxyable:
            self._monitor(workspace.id, session.id)
        return session

    # -- Monitoring ------------------------------------------------------------

    def _monitor(self, workspace_id: str, session_id: str) -> None:
        key = (workspace_id, session_id)
        self._stop(key)
        self._monitors[key] = asyncio.get_running_loop().create_task(self._watch(workspace_id, session_id))

    def _stop(self, key: tuple[str, str]) -> None:
        task = self._monitors.pop(key, None)
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    async def _watch(self, workspace_id: str, session_id: str) -> None:
        key = (workspace_id, session_id)
        try:
            for attempt in range(1, self._max_attempts + 1):
                await asyncio.sleep(self._poll_interval)
                try:
                    session = await self._service.get_session(workspace_id, session_id)
                except Exception as exc:
                    logger.error("Error checking session {} status: {}", session_id, exc)
                    self._auto_sessions.pop(workspace_id, None)
                    return

                if session.proxyable:
                    logger.info("Session {} is now ready", session_id)
                    return
                if session.state == LifecycleStatus.ERROR:
                    logger.error("Session {} failed to start", session_id)
                    self._auto_sessions.pop(workspace_id, None)
                    return
                logger.debug("Session {} still starting... (attempt {}/{})", session_id, attempt, self._max_attempts)

            logger.warning("Session {} took too long to start, stopping monitoring", session_id)
        finally:
            if self._monitors.get(key) is asyncio.current_task():
                del self._monitors[key]

    # -- Health ----------------------------------------------------------------

    async def session_health(self, workspace_id: str, session_id: str) -> SessionHealth:
        """Readiness report for one session.  Lookup failures are reported, not raised."""
        now = datetime.now(UTC)
        try:
            session = await self._service.get_session(workspace_id, session_id)
        except Exception as exc:
            return SessionHealth(ready=False, status="error", message=str(exc) or "Unknown error", checked_at=now)
        return SessionHealth(
            ready=session.proxyable,
            status=session.state,
            message=health_message(session.state),
            checked_at=now,
        )

    # -- Teardown --------------------------------------------------------------

    def cleanup(self, workspace_id: str) -> None:
        """Forget the auto session and stop every monitor for *workspace_id*."""
        self._auto_sessions.pop(workspace_id, None)
        for key in [k for k in self._monitors if k[0] == workspace_id]:
            self._stop(key)

    def close(self) -> None:
        for key in list(self._monitors):
            self._stop(key)
        self._auto_sessions.clear()
