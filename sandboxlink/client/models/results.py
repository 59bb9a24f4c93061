"""Typed results returned by the data service facade.

Unlike the wire schemas these are already interpreted: sandbox response
bodies have been parsed and statuses mapped to application enums.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from sandboxlink.client.models.enums import ConnectionStatus, FileKind, GitFileStatus


class HealthReport(BaseModel):
    status: ConnectionStatus
    version: str | None = None
    details: dict[str, Any] | None = None


class RepositoryInfo(BaseModel):
    """Structured repository reference.

    ``owner`` and ``name`` are only set when the URL matched a known host.
    """

    url: str
    ref: str = "main"
    owner: str | None = None
    name: str | None = None


class SandboxResponse(BaseModel):
    """Raw response from a sandbox, as relayed by the orchestrator proxy."""

    status_code: int
    body: str = ""
    headers: dict[str, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class FileEntry(BaseModel):
    path: str
    type: FileKind = FileKind.FILE


class FileContent(BaseModel):
    content: str
    language: str | None = None


class CommandResult(BaseModel):
    output: str = ""
    exit_code: int = 0


class TerminalEntry(BaseModel):
    """A command run in a session sandbox, with what it printed."""

    command: str
    output: str = ""
    timestamp: datetime


class GitFileChange(BaseModel):
    path: str
    status: GitFileStatus


class GitStatus(BaseModel):
    status: str = "clean"
    files: list[GitFileChange] = Field(default_factory=list)


class SessionHealth(BaseModel):
    ready: bool
    status: str
    message: str
    checked_at: datetime | None = None
