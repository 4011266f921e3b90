"""Page cache connection over an indexed key/value store.

Entries are stored as a JSON body plus two single-valued integer
secondary indexes, ``created_at_int`` and ``expires_at_int``. The
timestamps never appear in the stored body; ``read`` puts them back.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import structlog

from storehouse_core import path_codec
from storehouse_core.constants import (
    CREATED_AT_FIELD,
    CREATED_AT_INDEX,
    DEFAULT_BUCKET,
    EXPIRES_AT_FIELD,
    EXPIRES_AT_INDEX,
    JSON_CONTENT_TYPE,
)
from storehouse_core.interfaces.store import (
    Failure,
    NotFound,
    StoreBucket,
    StoreClient,
    StoreRecord,
)
from storehouse_core.models.entry import CacheEntry
from storehouse_infra.store.factories import create_store_client

logger = structlog.get_logger()


def _now() -> int:
    return int(time.time())


def _index_value(record: StoreRecord, name: str) -> int:
    """Read a single-valued index; absent is 0, a collection yields its element."""
    value: Any = record.indexes.get(name)
    if value is None:
        return 0
    if isinstance(value, Iterable) and not isinstance(value, str | bytes):
        value = next(iter(value), 0)
    return int(value)


class IndexedConnection:
    """Read, write, delete and soft-expire cache entries in one bucket."""

    def __init__(
        self,
        spec: Mapping[str, Any] | None = None,
        *,
        client: StoreClient | None = None,
        clock: Callable[[], int] = _now,
    ) -> None:
        """Open the bucket named by ``spec``.

        ``spec["bucket"]`` names the bucket (default ``page_cache``); every
        other key is handed to the store client factory unchanged. Pass
        ``client`` to use an already-built store client instead.
        """
        options = dict(spec or {})
        bucket_name = options.pop("bucket", None) or DEFAULT_BUCKET
        self._client = client if client is not None else create_store_client(options)
        self._bucket: StoreBucket = self._client.bucket(bucket_name)
        self._clock = clock

    @property
    def bucket_name(self) -> str:
        """Name of the bucket this connection writes to."""
        return self._bucket.name

    @property
    def bucket(self) -> StoreBucket:
        """The underlying bucket handle."""
        return self._bucket

    def now(self) -> int:
        """Current Unix time according to this connection's clock."""
        return self._clock()

    def read(self, key: str | None, skip_escape: bool = False) -> dict[str, Any] | None:
        """Return the stored payload with ``created_at``/``expires_at`` merged in.

        A missing key gives ``{}``. Store failures are raised unchanged.
        """
        path = path_codec.encode(key, skip_escape)
        if path is None:
            return None

        result = self._bucket.get(path)
        if isinstance(result, Failure):
            raise result.error
        if isinstance(result, NotFound):
            logger.debug("cache_miss", bucket=self.bucket_name, key=path)
            return {}

        record = result.record
        data = dict(record.body)
        data[EXPIRES_AT_FIELD] = _index_value(record, EXPIRES_AT_INDEX)
        data[CREATED_AT_FIELD] = _index_value(record, CREATED_AT_INDEX)
        return data

    def read_entry(self, key: str | None, skip_escape: bool = False) -> CacheEntry | None:
        """Like ``read`` but returns a CacheEntry, or None on a miss."""
        data = self.read(key, skip_escape)
        if key is None or not data:
            return None
        return CacheEntry.from_mapping(key, data)

    def write(
        self,
        key: str | None,
        entry: CacheEntry | Mapping[str, Any],
        skip_escape: bool = False,
    ) -> StoreRecord | None:
        """Replace the entry at ``key``.

        Timestamps go to the indexes (absent values become 0), the rest of
        the payload becomes the body. Returns the persisted record, or None
        when the key holds something that cannot be overwritten.
        """
        path = path_codec.encode(key, skip_escape)
        if path is None:
            return None
        if not isinstance(entry, CacheEntry):
            entry = CacheEntry.from_mapping(path, entry)

        record = self._bucket.get_or_new(path)
        if record is None:
            logger.warning("cache_write_skipped", bucket=self.bucket_name, key=path)
            return None

        record.content_type = JSON_CONTENT_TYPE
        record.body = dict(entry.payload)
        record.indexes = {
            CREATED_AT_INDEX: entry.created_at,
            EXPIRES_AT_INDEX: entry.expires_at,
        }
        stored = self._bucket.store(record)
        logger.debug(
            "cache_write",
            bucket=self.bucket_name,
            key=path,
            created_at=entry.created_at,
            expires_at=entry.expires_at,
        )
        return stored

    def delete(self, key: str | None, skip_escape: bool = False) -> dict[str, Any] | None:
        """Delete ``key`` and return what it held just before."""
        path = path_codec.encode(key, skip_escape)
        if path is None:
            return None
        data = self.read(path, skip_escape=True)
        self._bucket.delete(path)
        logger.debug("cache_delete", bucket=self.bucket_name, key=path, hit=bool(data))
        return data

    def expire(self, key: str | None, skip_escape: bool = False) -> StoreRecord | None:
        """Soft-expire ``key``: set ``expires_at`` to now, keep everything else."""
        path = path_codec.encode(key, skip_escape)
        if path is None:
            return None
        data = self.read(path, skip_escape=True)
        if not data:
            return None
        entry = CacheEntry.from_mapping(path, data).with_expiry(self.now())
        return self.write(path, entry, skip_escape=True)

    def close(self) -> None:
        """Release the store client."""
        self._client.close()
