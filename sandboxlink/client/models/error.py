"""Error value carried to consumers.

``APIError`` is data, not an exception.  Exceptions stay below the facade;
consumers that need to show a failure convert it once with
``sandboxlink.client.errors.to_api_error`` and keep the value around.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from sandboxlink.client.models.enums import ErrorCode


class APIError(BaseModel):
    code: ErrorCode = ErrorCode.UNKNOWN
    message: str
    details: dict[str, Any] | None = None
