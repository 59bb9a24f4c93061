"""Orchestrator wire schemas.

These mirror the orchestrator's JSON surface (camelCase on the wire) and are
kept apart from the domain models in ``session.py`` / ``workspace.py``:

- Every field is optional because the orchestrator omits zero values.
- ``state`` stays a plain string so an unknown enum value never fails
  validation; the adapter decides what it means.
- Timestamps are epoch seconds.  Numeric strings (int64 in protojson) are
  coerced by pydantic's lax mode.

Nothing outside ``transport.py`` and ``adapter.py`` should need these.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for wire schemas: camelCase aliases, either casing accepted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


class RepositoryConfig(WireModel):
    url: str | None = None
    ref: str | None = None


class EndpointStatus(WireModel):
    """``status`` sub-object carried by sessions and workspaces."""

    ready: bool | None = None
    internal_endpoint: str | None = None
    message: str | None = None


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class SessionConfig(WireModel):
    repository: RepositoryConfig | None = None
    environment: dict[str, str] | None = None
    context: str | None = None


class OrchestratorSession(WireModel):
    id: str | None = None
    name: str | None = None
    workspace_id: str | None = None
    user_id: str | None = None
    state: str | None = None
    created_at: float | None = None
    updated_at: float | None = None
    config: SessionConfig | None = None
    status: EndpointStatus | None = None
    labels: dict[str, str] | None = None


class ListSessionsResponse(WireModel):
    sessions: list[OrchestratorSession] = Field(default_factory=list)


class GetSessionResponse(WireModel):
    session: OrchestratorSession | None = None


class CreateSessionRequest(WireModel):
    name: str
    user_id: str
    workspace_id: str | None = None
    config: SessionConfig | None = None
    labels: dict[str, str] | None = None


class CreateSessionResponse(WireModel):
    session: OrchestratorSession | None = None


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


class WorkspaceResources(WireModel):
    cpu: str | None = None
    memory: str | None = None
    storage: str | None = None


class OrchestratorWorkspaceConfig(WireModel):
    repository: RepositoryConfig | None = None
    environment: dict[str, str] | None = None
    resources: WorkspaceResources | None = None


class OrchestratorWorkspace(WireModel):
    id: str | None = None
    name: str | None = None
    user_id: str | None = None
    state: str | None = None
    created_at: float | None = None
    updated_at: float | None = None
    config: OrchestratorWorkspaceConfig | None = None
    status: EndpointStatus | None = None
    labels: dict[str, str] | None = None


class ListWorkspacesResponse(WireModel):
    workspaces: list[OrchestratorWorkspace] = Field(default_factory=list)


class GetWorkspaceResponse(WireModel):
    workspace: OrchestratorWorkspace | None = None


class CreateWorkspaceRequest(WireModel):
    name: str
    user_id: str
    config: OrchestratorWorkspaceConfig | None = None
    labels: dict[str, str] | None = None


class CreateWorkspaceResponse(WireModel):
    workspace: OrchestratorWorkspace | None = None


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(WireModel):
    status: str | None = None
    version: str | None = None
    details: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# HTTP proxy
# ---------------------------------------------------------------------------


class HeaderPair(WireModel):
    key: str = ""
    value: str = ""


class ProxyHTTPRequest(WireModel):
    session_id: str
    method: str
    path: str
    headers: list[HeaderPair] = Field(default_factory=list)
    body: str | None = None
    user_id: str


class ProxyHTTPResponse(WireModel):
    status_code: int = 0
    body: str | None = None
    headers: list[HeaderPair] = Field(default_factory=list)
