"""Exceptions raised by the sync client and their conversion to ``APIError``.

Exceptions flow unchanged from the transport up through the facade.  Only
consumers (see ``sandboxlink.client.state``) turn them into ``APIError``
values, using ``to_api_error``; the title/suggestion helpers at the bottom
are for whatever renders those values.
"""

from __future__ import annotations

from typing import Any

from sandboxlink.client.models.enums import ErrorCode
from sandboxlink.client.models.error import APIError


class OrchestratorError(Exception):
    """Base class for failures reported by the sync client."""


class TransportError(OrchestratorError):
    """An orchestrator call failed.

    ``status_code`` is the HTTP status whenever a response was received: an
    error status, or a 2xx whose body could not be used.  It is ``None`` only
    when no response arrived (DNS, refused connection, timeout).
    """

    def __init__(self, message: str, *, status_code: int | None = None, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details

    @property
    def structured(self) -> bool:
        """True when the orchestrator answered, however unusable the answer."""
        return self.status_code is not None

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (HTTP {self.status_code})"


class SessionCreationFailed(OrchestratorError):
    """Raised when a create-session call returns no session object."""


class WorkspaceCreationFailed(OrchestratorError):
    """Raised when a create-workspace call returns no workspace object."""


class SandboxRequestError(OrchestratorError):
    """The proxy call succeeded but the sandbox answered with an error status."""

    def __init__(self, message: str, *, status_code: int, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ResourceNotFoundError(LookupError):
    """Raised when a workspace, session or conversation does not exist."""


# ---------------------------------------------------------------------------
# Conversion to APIError
# ---------------------------------------------------------------------------


def _code_for_status(status_code: int) -> ErrorCode | None:
    if status_code == 401:
        return ErrorCode.UNAUTHORIZED
    if status_code == 403:
        return ErrorCode.FORBIDDEN
    if status_code == 404:
        return ErrorCode.NOT_FOUND
    if status_code >= 500:
        return ErrorCode.SERVER_ERROR
    return None


def to_api_error(exc: BaseException, fallback: ErrorCode = ErrorCode.UNKNOWN) -> APIError:
    """Convert an exception into an ``APIError`` value.

    HTTP statuses with a dedicated code win over ``fallback``; a transport
    failure without a response is a ``NETWORK_ERROR``.
    """
    code = fallback
    details: dict[str, Any] | None = None

    if isinstance(exc, TransportError):
        details = dict(exc.details or {})
        if exc.status_code is None:
            code = ErrorCode.NETWORK_ERROR
        else:
            details["status_code"] = exc.status_code
            code = _code_for_status(exc.status_code) or fallback
        message = exc.message
    elif isinstance(exc, SandboxRequestError):
        details = {"status_code": exc.status_code}
        code = _code_for_status(exc.status_code) or fallback
        message = str(exc)
    elif isinstance(exc, ResourceNotFoundError):
        code = ErrorCode.NOT_FOUND
        message = str(exc) or "Resource not found"
    elif isinstance(exc, ConnectionError):
        code = ErrorCode.CONNECTION_ERROR
        message = str(exc) or "Connection failed"
    else:
        message = str(exc) or type(exc).__name__

    return APIError(code=code, message=message, details=details or None)


# ---------------------------------------------------------------------------
# Consumer-facing text
# ---------------------------------------------------------------------------

_TITLES: dict[ErrorCode, str] = {
    ErrorCode.LOAD_WORKSPACES_FAILED: "Failed to Load Workspaces",
    ErrorCode.CREATE_WORKSPACE_FAILED: "Failed to Create Workspace",
    ErrorCode.DELETE_WORKSPACE_FAILED: "Failed to Delete Workspace",
    ErrorCode.LOAD_SESSIONS_FAILED: "Failed to Load Sessions",
    ErrorCode.CREATE_SESSION_FAILED: "Failed to Create Session",
    ErrorCode.DELETE_SESSION_FAILED: "Failed to Delete Session",
    ErrorCode.CONNECTION_ERROR: "Connection Error",
    ErrorCode.NETWORK_ERROR: "Network Error",
    ErrorCode.UNAUTHORIZED: "Unauthorized Access",
    ErrorCode.FORBIDDEN: "Access Forbidden",
    ErrorCode.NOT_FOUND: "Resource Not Found",
    ErrorCode.SERVER_ERROR: "Server Error",
}

_SUGGESTIONS: dict[ErrorCode, str] = {
    ErrorCode.CONNECTION_ERROR: "Please check your internet connection and try again.",
    ErrorCode.NETWORK_ERROR: "Please check your internet connection and try again.",
    ErrorCode.UNAUTHORIZED: "Please check your authentication credentials.",
    ErrorCode.FORBIDDEN: "You do not have permission to perform this action.",
    ErrorCode.NOT_FOUND: "The requested resource could not be found.",
    ErrorCode.SERVER_ERROR: "There was a problem with the server. Please try again later.",
    ErrorCode.LOAD_WORKSPACES_FAILED: "Check your API connection and ensure the orchestrator service is running.",
    ErrorCode.CREATE_WORKSPACE_FAILED: (
        "Verify the workspace name is valid and the repository URL (if provided) is accessible."
    ),
    ErrorCode.DELETE_WORKSPACE_FAILED: "The workspace may have active sessions. Try stopping all sessions first.",
}

_RETRYABLE = frozenset({
    ErrorCode.CONNECTION_ERROR,
    ErrorCode.NETWORK_ERROR,
    ErrorCode.SERVER_ERROR,
    ErrorCode.LOAD_WORKSPACES_FAILED,
    ErrorCode.LOAD_SESSIONS_FAILED,
})


def error_title(code: ErrorCode) -> str:
    return _TITLES.get(code, "An Error Occurred")


def error_suggestion(code: ErrorCode) -> str:
    return _SUGGESTIONS.get(code, "Please try again or contact support if the problem persists.")


def is_retryable(code: ErrorCode) -> bool:
    """Whether a consumer should offer a retry affordance for ``code``."""
    return code in _RETRYABLE
