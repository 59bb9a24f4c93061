"""Tests for exception to APIError conversion and the consumer-facing text."""

from __future__ import annotations

import pytest

from sandboxlink.client.errors import (
    ResourceNotFoundError,
    SandboxRequestError,
    TransportError,
    error_suggestion,
    error_title,
    is_retryable,
    to_api_error,
)
from sandboxlink.client.models import ErrorCode


@pytest.mark.parametrize(
    ("status_code", "code"),
    [
        (401, ErrorCode.UNAUTHORIZED),
        (403, ErrorCode.FORBIDDEN),
        (404, ErrorCode.NOT_FOUND),
        (500, ErrorCode.SERVER_ERROR),
        (503, ErrorCode.SERVER_ERROR),
        (409, ErrorCode.LOAD_SESSIONS_FAILED),
    ],
)
def test_http_status_codes(status_code: int, code: ErrorCode) -> None:
    error = to_api_error(
        TransportError("failed", status_code=status_code, details={"path": "/sessions"}),
        ErrorCode.LOAD_SESSIONS_FAILED,
    )

    assert error.code == code
    assert error.message == "failed"
    assert error.details == {"path": "/sessions", "status_code": status_code}


def test_transport_failure_without_response_is_network_error() -> None:
    error = to_api_error(TransportError("connection refused"), ErrorCode.LOAD_WORKSPACES_FAILED)

    assert error.code == ErrorCode.NETWORK_ERROR
    assert error.details is None


def test_sandbox_error() -> None:
    error = to_api_error(SandboxRequestError("Sandbox returned 502", status_code=502, body="x"))

    assert error.code == ErrorCode.SERVER_ERROR
    assert error.details == {"status_code": 502}


def test_not_found_and_connection_errors() -> None:
    assert to_api_error(ResourceNotFoundError("Session 'x' not found")).code == ErrorCode.NOT_FOUND
    assert to_api_error(ResourceNotFoundError()).message == "Resource not found"

    connection = to_api_error(ConnectionRefusedError())
    assert connection.code == ErrorCode.CONNECTION_ERROR
    assert connection.message == "Connection failed"


def test_fallback_code() -> None:
    assert to_api_error(RuntimeError("boom")).code == ErrorCode.UNKNOWN
    error = to_api_error(ValueError(), ErrorCode.CREATE_SESSION_FAILED)
    assert error.code == ErrorCode.CREATE_SESSION_FAILED
    assert error.message == "ValueError"


def test_transport_error_str() -> None:
    assert str(TransportError("Not found", status_code=404)) == "Not found (HTTP 404)"
    assert str(TransportError("timed out")) == "timed out"
    assert TransportError("x", status_code=500).structured is True
    assert TransportError("x").structured is False


def test_titles_and_suggestions() -> None:
    assert error_title(ErrorCode.UNAUTHORIZED) == "Unauthorized Access"
    assert error_title(ErrorCode.UNKNOWN) == "An Error Occurred"
    assert error_suggestion(ErrorCode.NETWORK_ERROR) == "Please check your internet connection and try again."
    assert "contact support" in error_suggestion(ErrorCode.CREATE_SESSION_FAILED)


@pytest.mark.parametrize(
    ("code", "retryable"),
    [
        (ErrorCode.NETWORK_ERROR, True),
        (ErrorCode.SERVER_ERROR, True),
        (ErrorCode.LOAD_WORKSPACES_FAILED, True),
        (ErrorCode.UNAUTHORIZED, False),
        (ErrorCode.NOT_FOUND, False),
        (ErrorCode.CREATE_WORKSPACE_FAILED, False),
    ],
)
def test_retryable(code: ErrorCode, retryable: bool) -> None:
    assert is_retryable(code) is retryable
