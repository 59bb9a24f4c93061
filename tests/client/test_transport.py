"""Unit tests for the orchestrator HTTP client (``httpx.MockTransport``, no network)."""

from __future__ import annotations

import httpx
import pytest
from fakes import BASE_URL, FakeOrchestrator, wire_session, wire_workspace

from sandboxlink.client.errors import TransportError, to_api_error
from sandboxlink.client.models import ErrorCode
from sandboxlink.client.models.wire import (
    CreateSessionRequest,
    CreateWorkspaceRequest,
    HeaderPair,
    ProxyHTTPRequest,
)
from sandboxlink.client.transport import OrchestratorClient


async def test_check_health(client: OrchestratorClient, orchestrator: FakeOrchestrator) -> None:
    orchestrator.route("GET", "/health", {"status": "SERVING", "version": "1.4.0"})

    health = await client.check_health()

    assert health.status == "SERVING"
    assert health.version == "1.4.0"
    assert str(orchestrator.last.url) == f"{BASE_URL}/health"


async def test_list_sessions_parses_camel_case(client: OrchestratorClient, orchestrator: FakeOrchestrator) -> None:
    orchestrator.route("GET", "/sessions", {"sessions": [wire_session("s-1"), wire_session("s-2")]})

    response = await client.list_sessions()

    assert [s.id for s in response.sessions] == ["s-1", "s-2"]
    assert response.sessions[0].workspace_id == "ws-1"
    assert response.sessions[0].status is not None
    assert response.sessions[0].status.internal_endpoint == "10.0.0.5:8080"
    assert "workspaceId" not in orchestrator.last.url.params


async def test_list_sessions_filters_by_workspace(client: OrchestratorClient, orchestrator: FakeOrchestrator) -> None:
    orchestrator.route("GET", "/sessions", {})

    response = await client.list_sessions("ws-9")

    assert response.sessions == []
    assert orchestrator.last.url.params["workspaceId"] == "ws-9"


async def test_create_session_sends_camel_case_body(client: OrchestratorClient, orchestrator: FakeOrchestrator) -> None:
    orchestrator.route("POST", "/sessions", {"session": wire_session("s-new")})

    response = await client.create_session(
        CreateSessionRequest(name="demo", user_id="u1", workspace_id="ws-1", labels={"a": "b"})
    )

    assert response.session is not None
    assert response.session.id == "s-new"
    assert orchestrator.last_json() == {"name": "demo", "userId": "u1", "workspaceId": "ws-1", "labels": {"a": "b"}}


async def test_unknown_state_string_is_accepted(client: OrchestratorClient, orchestrator: FakeOrchestrator) -> None:
    orchestrator.route("GET", "/sessions/s-1", {"session": wire_session("s-1", state="SESSION_STATE_PAUSED")})

    response = await client.get_session("s-1")

    assert response.session is not None
    assert response.session.state == "SESSION_STATE_PAUSED"


async def test_delete_session_accepts_empty_body(client: OrchestratorClient, orchestrator: FakeOrchestrator) -> None:
    orchestrator.route("DELETE", "/sessions/s-1")

    await client.delete_session("s-1")

    assert orchestrator.last.method == "DELETE"


async def test_proxy_http(client: OrchestratorClient, orchestrator: FakeOrchestrator) -> None:
    orchestrator.route(
        "POST",
        "/sessions/s-1/proxy",
        {"statusCode": 201, "body": "{}", "headers": [{"key": "X-A", "value": "1"}]},
    )
    request = ProxyHTTPRequest(
        session_id="s-1",
        method="POST",
        path="/chat/messages",
        headers=[HeaderPair(key="X-Test", value="1")],
        body='{"content": "hi"}',
        user_id="u1",
    )

    response = await client.proxy_http(request)

    assert response.status_code == 201
    assert response.headers == [HeaderPair(key="X-A", value="1")]
    sent = orchestrator.last_json()
    assert sent["sessionId"] == "s-1"
    assert sent["path"] == "/chat/messages"
    assert sent["headers"] == [{"key": "X-Test", "value": "1"}]


async def test_workspace_routes(client: OrchestratorClient, orchestrator: FakeOrchestrator) -> None:
    orchestrator.route("GET", "/workspaces", {"workspaces": [wire_workspace()]})
    orchestrator.route("GET", "/workspaces/ws-1", {"workspace": wire_workspace()})
    orchestrator.route("POST", "/workspaces", {"workspace": wire_workspace("ws-2")})
    orchestrator.route("DELETE", "/workspaces/ws-1")

    listed = await client.list_workspaces("u1")
    assert orchestrator.last.url.params["userId"] == "u1"
    assert [w.id for w in listed.workspaces] == ["ws-1"]

    fetched = await client.get_workspace("ws-1")
    assert fetched.workspace is not None
    assert fetched.workspace.config is not None

    created = await client.create_workspace(CreateWorkspaceRequest(name="w", user_id="u1"))
    assert created.workspace is not None
    assert created.workspace.id == "ws-2"

    await client.delete_workspace("ws-1")


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


async def test_error_status_raises_structured_error(client: OrchestratorClient, orchestrator: FakeOrchestrator) -> None:
    orchestrator.route("GET", "/sessions/missing", {"message": "session not found"}, status_code=404)

    with pytest.raises(TransportError) as exc_info:
        await client.get_session("missing")

    assert exc_info.value.status_code == 404
    assert exc_info.value.structured is True
    assert exc_info.value.message == "session not found"


async def test_error_status_with_plain_text_body(client: OrchestratorClient, orchestrator: FakeOrchestrator) -> None:
    orchestrator.handle("GET", "/health", lambda _r: httpx.Response(503, text="upstream down"))

    with pytest.raises(TransportError) as exc_info:
        await client.check_health()

    assert exc_info.value.status_code == 503
    assert exc_info.value.message == "upstream down"


async def test_network_failure_has_no_status() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with OrchestratorClient(BASE_URL, transport=httpx.MockTransport(refuse)) as client:
        with pytest.raises(TransportError) as exc_info:
            await client.check_health()

    assert exc_info.value.status_code is None
    assert exc_info.value.structured is False


async def test_timeout_has_no_status() -> None:
    def slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    async with OrchestratorClient(BASE_URL, transport=httpx.MockTransport(slow)) as client:
        with pytest.raises(TransportError) as exc_info:
            await client.list_sessions()

    assert exc_info.value.status_code is None
    assert "timed out" in str(exc_info.value)


async def test_malformed_payload_raises(client: OrchestratorClient, orchestrator: FakeOrchestrator) -> None:
    orchestrator.route("GET", "/sessions", {"sessions": "not-a-list"})

    with pytest.raises(TransportError) as exc_info:
        await client.list_sessions()

    assert exc_info.value.details is not None
    assert "errors" in exc_info.value.details


@pytest.mark.parametrize(
    "body",
    [
        {"text": "<html>oops</html>"},
        {"json": {"sessions": "not-a-list"}},
        {"json": ["not", "an", "object"]},
    ],
    ids=["invalid-json", "failed-validation", "wrong-shape"],
)
async def test_unusable_success_body_keeps_status(
    client: OrchestratorClient, orchestrator: FakeOrchestrator, body: dict
) -> None:
    orchestrator.handle("GET", "/sessions", lambda _r: httpx.Response(200, **body))

    with pytest.raises(TransportError) as exc_info:
        await client.list_sessions()

    assert exc_info.value.status_code == 200
    assert exc_info.value.structured is True
    # Not a network failure: the operation's own code applies.
    assert to_api_error(exc_info.value, ErrorCode.LOAD_SESSIONS_FAILED).code == ErrorCode.LOAD_SESSIONS_FAILED


# ---------------------------------------------------------------------------
# Endpoint changes
# ---------------------------------------------------------------------------


async def test_update_base_url(client: OrchestratorClient, orchestrator: FakeOrchestrator) -> None:
    orchestrator.route("GET", "/health", {"status": "SERVING"})

    client.update_base_url("http://other.test:9091/")
    await client.check_health()

    assert client.base_url == "http://other.test:9091"
    assert orchestrator.last.url.host == "other.test"
    assert orchestrator.last.url.port == 9091
