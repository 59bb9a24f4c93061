"""Workspace domain model.

A workspace is a provisioned remote sandbox environment.  Sessions run
inside exactly one workspace.  Status is owned by the orchestrator and is
only ever refreshed from it.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from sandboxlink.client.models.enums import LifecycleStatus


class RepositoryRef(BaseModel):
    url: str
    ref: str | None = None


class ResourceLimits(BaseModel):
    cpu: str | None = None
    memory: str | None = None
    storage: str | None = None


class WorkspaceConfig(BaseModel):
    repository: RepositoryRef | None = None
    environment: dict[str, str] | None = None
    resources: ResourceLimits | None = None


class Workspace(BaseModel):
    """Workspace as seen by the application."""

    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    status: LifecycleStatus = LifecycleStatus.STOPPED
    config: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    labels: dict[str, str] | None = None
    user_id: str = ""
