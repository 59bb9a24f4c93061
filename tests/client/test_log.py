from __future__ import annotations

import logging
import sys
from collections.abc import Iterator

import pytest
from loguru import logger

from sandboxlink.client.log import setup_logging


@pytest.fixture
def records() -> Iterator[list[str]]:
    captured: list[str] = []
    setup_logging("debug", sink=captured.append)
    yield captured
    logger.remove()
    logger.add(sys.stderr)


def test_loguru_messages_reach_sink(records: list[str]) -> None:
    logger.info("session {} ready", "s-1")

    assert any("session s-1 ready" in line and "INFO" in line for line in records)


def test_stdlib_logging_is_intercepted(records: list[str]) -> None:
    logging.getLogger("sandboxlink.test").warning("from stdlib %s", "logging")

    assert any("from stdlib logging" in line and "WARNING" in line for line in records)


def test_noisy_libraries_are_quieted(records: list[str]) -> None:
    logging.getLogger("httpx").info("HTTP Request: GET /health")
    logging.getLogger("httpx").warning("retrying")

    assert not any("HTTP Request" in line for line in records)
    assert any("retrying" in line for line in records)
