import random

import httpx
import pytest

from medextract.pipeline.clients.transport import ResilientTransport
from medextract.pipeline.resilience.retry import RetryConfig
from tests.helpers import SleepRecorder


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_transport(sleeper):
    """Build ResilientTransports over httpx.MockTransport with recorded sleeps."""
    created = []

    def _make(handler, **retry_kwargs) -> ResilientTransport:
        transport = ResilientTransport(
            retry_config=RetryConfig(**retry_kwargs),
            transport=httpx.MockTransport(handler),
            sleep=sleeper,
            rng=random.Random(1234),
        )
        created.append(transport)
        return transport

    yield _make

    for transport in created:
        transport.close()
