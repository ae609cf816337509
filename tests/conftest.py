from __future__ import annotations

import pytest

from tests.helpers import no_sleep
from zk_bridge_indexer.app.application.services.retrying_caller import RetryingCaller


@pytest.fixture
def unbounded_caller() -> RetryingCaller:
    return RetryingCaller(max_attempts=None, pause_seconds=0, sleep=no_sleep)


@pytest.fixture
def bounded_caller() -> RetryingCaller:
    return RetryingCaller(max_attempts=3, pause_seconds=0, sleep=no_sleep)
