"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

import logging
from collections.abc import Generator

import pytest

from storehouse_infra.cache.connection import IndexedConnection
from storehouse_infra.cache.sweeper import Sweeper
from storehouse_infra.store.memory_store import MemoryStoreClient
from tests.mocks.mock_store import FixedClock, make_memory_connection


@pytest.fixture
def clock() -> FixedClock:
    """Return a clock frozen at NOW."""
    return FixedClock()


@pytest.fixture
def memory_client() -> MemoryStoreClient:
    """Return an empty in-memory store client."""
    return MemoryStoreClient()


@pytest.fixture
def connection(clock: FixedClock, memory_client: MemoryStoreClient) -> IndexedConnection:
    """Return a connection over the in-memory store, driven by ``clock``."""
    return make_memory_connection(clock=clock, client=memory_client)


@pytest.fixture
def sweeper(connection: IndexedConnection) -> Sweeper:
    """Return a sweeper over ``connection`` with default windows."""
    return Sweeper(connection)


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    """Save and restore root logger handlers replaced by configure_logging()."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.level = original_level
