"""Tests for behaviour carried by the domain models."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from sandboxlink.client.models import (
    LifecycleStatus,
    Message,
    MessageStatus,
    MessageType,
    Notification,
    SandboxResponse,
    Session,
)

NOW = datetime(2024, 1, 1, tzinfo=UTC)


def make_message(status: MessageStatus) -> Message:
    return Message(id="m1", session_id="s1", type=MessageType.USER, content="hi", status=status, timestamp=NOW)


@pytest.mark.parametrize("target", [MessageStatus.SENT, MessageStatus.ERROR])
def test_sending_message_can_settle(target: MessageStatus) -> None:
    message = make_message(MessageStatus.SENDING)
    message.mark(target)
    assert message.status == target


def test_same_status_is_a_no_op() -> None:
    message = make_message(MessageStatus.SENT)
    message.mark(MessageStatus.SENT)
    assert message.status == MessageStatus.SENT


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (MessageStatus.SENT, MessageStatus.ERROR),
        (MessageStatus.ERROR, MessageStatus.SENT),
        (MessageStatus.SENT, MessageStatus.SENDING),
        (MessageStatus.SENDING, MessageStatus.DELIVERED),
    ],
)
def test_invalid_transitions(current: MessageStatus, target: MessageStatus) -> None:
    message = make_message(current)
    with pytest.raises(ValueError, match="Invalid message status transition"):
        message.mark(target)
    assert message.status == current


@pytest.mark.parametrize(
    ("state", "ready", "proxyable"),
    [
        (LifecycleStatus.RUNNING, True, True),
        (LifecycleStatus.RUNNING, False, False),
        (LifecycleStatus.CREATING, True, False),
        (LifecycleStatus.STOPPED, False, False),
    ],
)
def test_session_proxyable(state: LifecycleStatus, ready: bool, proxyable: bool) -> None:
    session = Session(id="s1", name="s", created_at=NOW, updated_at=NOW, state=state, ready=ready)
    assert session.proxyable is proxyable


def test_notification_timestamp_is_timezone_aware() -> None:
    assert Notification(id="n", title="t").created_at.tzinfo is not None


def test_notification_auto_dismiss() -> None:
    assert Notification(id="n", title="t").auto_dismiss is True
    assert Notification(id="n", title="t", duration=2.5).auto_dismiss is True
    assert Notification(id="n", title="t", duration=0).auto_dismiss is False
    assert Notification(id="n", title="t", persistent=True).auto_dismiss is False


def test_sandbox_response_ok() -> None:
    assert SandboxResponse(status_code=204).ok is True
    assert SandboxResponse(status_code=302).ok is False
    assert SandboxResponse(status_code=500).ok is False
