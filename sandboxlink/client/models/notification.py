"""Notification data model."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from sandboxlink.client.models.enums import Severity


class Notification(BaseModel):
    """Transient advisory message.

    ``duration`` is in seconds; ``None`` means the manager default.  A
    ``duration`` of ``0`` or ``persistent=True`` disables auto-dismissal.
    """

    id: str
    severity: Severity = Severity.INFO
    title: str
    message: str | None = None
    duration: float | None = None
    persistent: bool = False
    visible: bool = False
    exiting: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def auto_dismiss(self) -> bool:
        return not self.persistent and self.duration != 0
