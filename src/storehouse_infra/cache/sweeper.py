"""Bulk expiry and cleanup over the ``created_at_int`` index.

Keys are discovered one day-wide window at a time, walking backwards from
now towards a fixed floor 60 days back. The walk stops at the floor or at
the first window with no matching keys, whichever comes first. That early
stop can miss entries sitting behind an empty day; it is kept so sweeps
stay bounded and behave the same against existing data.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from typing import Literal

import structlog
from structlog.contextvars import bound_contextvars

from storehouse_core import path_codec
from storehouse_core.constants import (
    CREATED_AT_INDEX,
    SWEEP_HORIZON_SECONDS,
    SWEEP_WINDOW_SECONDS,
)
from storehouse_core.models.entry import CacheEntry
from storehouse_core.models.sweep import SweepResult
from storehouse_infra.cache.connection import IndexedConnection

logger = structlog.get_logger()


class Sweeper:
    """Soft-expire or delete every entry under a namespace."""

    def __init__(
        self,
        connection: IndexedConnection,
        *,
        window_seconds: int = SWEEP_WINDOW_SECONDS,
        horizon_seconds: int = SWEEP_HORIZON_SECONDS,
    ) -> None:
        """Initialize with a connection and the window/horizon sizes."""
        self._connection = connection
        self._window = window_seconds
        self._horizon = horizon_seconds

    def clean(self, namespace: str | None = None) -> SweepResult:
        """Delete entries that already expired and soft-expire the rest.

        Running this twice a cycle apart therefore empties the namespace.
        """
        return self._sweep("clean", namespace, self._clean_key)

    expire_all = clean

    def clear(self, namespace: str | None = None) -> SweepResult:
        """Delete every entry under the namespace, expired or not."""
        return self._sweep("clear", namespace, self._clear_key)

    def _clean_key(self, key: str, result: SweepResult) -> None:
        data = self._connection.read(key, skip_escape=True)
        if not data:
            result.skipped += 1
            return
        if CacheEntry.from_mapping(key, data).is_expired(self._connection.now()):
            self._connection.delete(key, skip_escape=True)
            result.deleted += 1
        else:
            self._connection.expire(key, skip_escape=True)
            result.expired += 1

    def _clear_key(self, key: str, result: SweepResult) -> None:
        self._connection.delete(key, skip_escape=True)
        result.deleted += 1

    def _sweep(
        self,
        operation: Literal["clean", "clear"],
        namespace: str | None,
        action: Callable[[str, SweepResult], None],
    ) -> SweepResult:
        prefix = path_codec.encode(namespace)
        result = SweepResult(operation=operation, namespace=prefix)
        started = time.monotonic()

        with bound_contextvars(sweep_operation=operation, sweep_namespace=prefix):
            logger.info("sweep_started", bucket=self._connection.bucket_name)
            for key in self._chunked(prefix, result):
                action(key, result)
            result.duration_seconds = time.monotonic() - started
            logger.info(
                "sweep_finished",
                windows=result.windows_scanned,
                matched=result.keys_matched,
                deleted=result.deleted,
                expired=result.expired,
                skipped=result.skipped,
                duration_seconds=round(result.duration_seconds, 3),
            )
        return result

    def _chunked(self, prefix: str | None, result: SweepResult) -> Iterator[str]:
        """Yield keys under ``prefix``, newest day first."""
        now = self._connection.now()
        floor = now - self._horizon
        window_end = now

        while True:
            window_start = max(window_end - self._window, floor)
            keys = self._connection.bucket.get_index(CREATED_AT_INDEX, window_end, window_start)
            result.windows_scanned += 1

            matched = 0
            for key in keys:
                if prefix is None or key.startswith(prefix):
                    yield key
                    matched += 1
            result.keys_matched += matched
            logger.debug(
                "sweep_window",
                window_end=window_end,
                window_start=window_start,
                keys=len(keys),
                matched=matched,
            )

            window_end -= self._window
            if not (floor < window_end and matched > 0):
                break
