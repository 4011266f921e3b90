"""Integration test fixtures: a real Redis, everything else in-process."""

from __future__ import annotations

import socket
import time
from collections.abc import Generator

import pytest

from storehouse_infra.cache.connection import IndexedConnection
from storehouse_infra.store.redis_store import RedisStoreClient
from tests.mocks.mock_store import FixedClock

# ---------------------------------------------------------------------------
# Service health checks (with retry for CI container start-up)
# ---------------------------------------------------------------------------


def _tcp_reachable(
    host: str,
    port: int,
    timeout: float = 1.0,
    retries: int = 10,
    delay: float = 2.0,
) -> bool:
    """Check if a TCP service is reachable, retrying on failure."""
    for attempt in range(retries):
        try:
            with socket.create_connection((host, port), timeout=timeout):
                return True
        except OSError:
            if attempt < retries - 1:
                time.sleep(delay)
    return False


_redis_up = _tcp_reachable("localhost", 6379, retries=3, delay=1.0)

require_redis = pytest.mark.skipif(
    not _redis_up,
    reason="Redis not reachable on localhost:6379",
)


# ---------------------------------------------------------------------------
# Redis fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def redis_client() -> Generator[object, None, None]:
    """Function-scoped Redis client on test DB 1, flushed before each test."""
    if not _redis_up:
        pytest.skip("Redis not available")

    from redis import Redis

    client = Redis.from_url("redis://localhost:6379/1")
    client.flushdb()
    yield client
    client.flushdb()
    client.close()


@pytest.fixture
def clock() -> FixedClock:
    """Return a clock frozen at NOW."""
    return FixedClock()


@pytest.fixture
def redis_connection(redis_client: object, clock: FixedClock) -> IndexedConnection:
    """IndexedConnection over the test Redis database."""
    from redis import Redis

    assert isinstance(redis_client, Redis)
    return IndexedConnection(
        {"bucket": "page_cache_test"},
        client=RedisStoreClient(redis_client),
        clock=clock,
    )
