"""Orchestrator transport client.

Typed async wrapper around the orchestrator's HTTP/JSON surface.  Each
operation takes a wire request model and returns a wire response model, or
raises ``TransportError``.  No caching, no retries, and no interpretation of
proxied sandbox bodies.

The base endpoint can be changed at runtime with ``update_base_url``; the
underlying ``httpx.AsyncClient`` is shared, so requests already in flight
finish against the endpoint they started with.
"""

from __future__ import annotations

from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from loguru import logger
from pydantic import ValidationError

from sandboxlink.client.errors import TransportError
from sandboxlink.client.models.wire import (
    CreateSessionRequest,
    CreateSessionResponse,
    CreateWorkspaceRequest,
    CreateWorkspaceResponse,
    GetSessionResponse,
    GetWorkspaceResponse,
    HealthResponse,
    ListSessionsResponse,
    ListWorkspacesResponse,
    ProxyHTTPRequest,
    ProxyHTTPResponse,
    WireModel,
)

ResponseT = TypeVar("ResponseT", bound=WireModel)


def _segment(value: str) -> str:
    return quote(value, safe="")


def _error_message(response: httpx.Response) -> tuple[str, dict[str, Any] | None]:
    """Best-effort message and details from an error response."""
    try:
        data = response.json()
    except ValueError:
        text = response.text.strip()
        return text or response.reason_phrase or "Unknown error", None
    if isinstance(data, dict):
        message = data.get("message") or data.get("error") or response.reason_phrase or "Unknown error"
        return str(message), data
    return response.reason_phrase or "Unknown error", None


class OrchestratorClient:
    """HTTP client for the orchestrator API."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    # -- Endpoint --------------------------------------------------------------

    @property
    def base_url(self) -> str:
        return self._base_url

    def update_base_url(self, base_url: str) -> None:
        self._base_url = base_url.rstrip("/")
        logger.info("Orchestrator endpoint updated to {}", self._base_url)

    # -- Lifecycle -------------------------------------------------------------

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> OrchestratorClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # -- Plumbing --------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> tuple[int, dict[str, Any]]:
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.request(method, url, json=json, params=params)
        except httpx.TimeoutException as exc:
            logger.warning("Orchestrator timeout: {} {}", method, path)
            msg = f"Orchestrator request timed out: {method} {path}"
            raise TransportError(msg) from exc
        except httpx.RequestError as exc:
            logger.warning("Orchestrator unreachable: {} {} ({})", method, path, exc)
            msg = f"Orchestrator request error: {exc}"
            raise TransportError(msg) from exc

        if response.status_code >= 400:
            message, details = _error_message(response)
            logger.warning("Orchestrator error: {} {} -> {} {}", method, path, response.status_code, message)
            raise TransportError(message, status_code=response.status_code, details=details)

        if not response.content:
            return response.status_code, {}
        try:
            data = response.json()
        except ValueError as exc:
            msg = f"Invalid JSON in orchestrator response: {method} {path}"
            raise TransportError(msg, status_code=response.status_code) from exc
        if not isinstance(data, dict):
            msg = f"Unexpected orchestrator response shape: {method} {path}"
            raise TransportError(msg, status_code=response.status_code)
        return response.status_code, data

    async def _fetch(
        self,
        model: type[ResponseT],
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> ResponseT:
        status_code, data = await self._request(method, path, json=json, params=params)
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            msg = f"Malformed orchestrator response for {path}: {exc.error_count()} validation error(s)"
            raise TransportError(
                msg,
                status_code=status_code,
                details={"errors": exc.errors(include_url=False)},
            ) from exc

    # -- Health ----------------------------------------------------------------

    async def check_health(self) -> HealthResponse:
        return await self._fetch(HealthResponse, "GET", "/health")

    # -- Sessions --------------------------------------------------------------

    async def list_sessions(self, workspace_id: str | None = None) -> ListSessionsResponse:
        params = {"workspaceId": workspace_id} if workspace_id else None
        return await self._fetch(ListSessionsResponse, "GET", "/sessions", params=params)

    async def get_session(self, session_id: str) -> GetSessionResponse:
        path = f"/sessions/{_segment(session_id)}"
        return await self._fetch(GetSessionResponse, "GET", path)

    async def create_session(self, request: CreateSessionRequest) -> CreateSessionResponse:
        return await self._fetch(CreateSessionResponse, "POST", "/sessions", json=request.to_wire())

    async def delete_session(self, session_id: str) -> None:
        await self._request("DELETE", f"/sessions/{_segment(session_id)}")

    async def proxy_http(self, request: ProxyHTTPRequest) -> ProxyHTTPResponse:
        path = f"/sessions/{_segment(request.session_id)}/proxy"
        return await self._fetch(ProxyHTTPResponse, "POST", path, json=request.to_wire())

    # -- Workspaces ------------------------------------------------------------

    async def list_workspaces(self, user_id: str | None = None) -> ListWorkspacesResponse:
        params = {"userId": user_id} if user_id else None
        return await self._fetch(ListWorkspacesResponse, "GET", "/workspaces", params=params)

    async def get_workspace(self, workspace_id: str) -> GetWorkspaceResponse:
        path = f"/workspaces/{_segment(workspace_id)}"
        return await self._fetch(GetWorkspaceResponse, "GET", path)

    async def create_workspace(self, request: CreateWorkspaceRequest) -> CreateWorkspaceResponse:
        return await self._fetch(CreateWorkspaceResponse, "POST", "/workspaces", json=request.to_wire())

    async def delete_workspace(self, workspace_id: str) -> None:
        await self._request("DELETE", f"/workspaces/{_segment(workspace_id)}")
