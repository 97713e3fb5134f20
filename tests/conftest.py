from __future__ import annotations

import pytest
from loguru import logger

from tests.fakes import FakeProvider


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def log_records():
    """Capture cloudgroups log records emitted during a test."""
    records: list[dict] = []
    logger.enable("cloudgroups")
    hid = logger.add(lambda message: records.append(message.record), level="TRACE")
    yield records
    logger.remove(hid)
    logger.disable("cloudgroups")
