"""Factory functions for creating store clients from a connection spec."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from storehouse_core.exceptions import StoreConfigurationError
from storehouse_core.interfaces.store import StoreClient


def create_store_client(options: Mapping[str, Any]) -> StoreClient:
    """Create a store client from pass-through connection options.

    ``backend`` selects the implementation (``"redis"`` by default); the
    remaining options are forwarded to that client untouched.
    """
    opts = dict(options)
    backend = opts.pop("backend", "redis")

    if backend == "memory":
        from storehouse_infra.store.memory_store import MemoryStoreClient

        return MemoryStoreClient()

    if backend == "redis":
        from storehouse_infra.store.redis_store import RedisStoreClient

        return RedisStoreClient.from_options(opts)

    msg = f"unknown store backend: {backend!r}"
    raise StoreConfigurationError(msg)
