"""Redis-backed implementation of StoreClient.

Each record is a hash at ``{bucket}:objects:{key}`` holding the content
type, the JSON body and one ``index:<name>`` field per secondary index.
Each secondary index is a sorted set at ``{bucket}:index:{name}`` whose
members are record keys scored by the index value. Writes and deletes run as
WATCHed MULTI transactions so the hash and its index entries move together.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import structlog
from redis import Redis
from redis.client import Pipeline
from redis.exceptions import RedisError

from storehouse_core.constants import JSON_CONTENT_TYPE
from storehouse_core.exceptions import MalformedRecordError
from storehouse_core.interfaces.store import (
    Failure,
    FetchResult,
    Found,
    NotFound,
    StoreRecord,
)

logger = structlog.get_logger()

CONTENT_TYPE_FIELD = "content_type"
BODY_FIELD = "body"
INDEX_FIELD_PREFIX = "index:"


def _text(value: bytes | str) -> str:
    """Decode a redis reply item."""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def _encode_record(record: StoreRecord) -> dict[str, str | int]:
    """Flatten a record into hash fields."""
    fields: dict[str, str | int] = {
        CONTENT_TYPE_FIELD: record.content_type,
        BODY_FIELD: json.dumps(record.body),
    }
    for name, value in record.indexes.items():
        fields[f"{INDEX_FIELD_PREFIX}{name}"] = int(value)
    return fields


def _decode_record(key: str, raw: Mapping[Any, Any]) -> StoreRecord:
    """Rebuild a record from hash fields, or raise MalformedRecordError."""
    fields = {_text(k): _text(v) for k, v in raw.items()}
    if BODY_FIELD not in fields:
        msg = f"{key}: no body field"
        raise MalformedRecordError(msg)
    try:
        body = json.loads(fields[BODY_FIELD])
    except json.JSONDecodeError as exc:
        msg = f"{key}: body is not JSON"
        raise MalformedRecordError(msg) from exc
    if not isinstance(body, dict):
        msg = f"{key}: body is not a JSON object"
        raise MalformedRecordError(msg)

    indexes: dict[str, int] = {}
    for field_name, value in fields.items():
        if not field_name.startswith(INDEX_FIELD_PREFIX):
            continue
        try:
            indexes[field_name[len(INDEX_FIELD_PREFIX) :]] = int(value)
        except ValueError as exc:
            msg = f"{key}: index {field_name} is not an integer"
            raise MalformedRecordError(msg) from exc

    return StoreRecord(
        key=key,
        content_type=fields.get(CONTENT_TYPE_FIELD, JSON_CONTENT_TYPE),
        body=body,
        indexes=indexes,
    )


class RedisBucket:
    """Bucket stored as redis hashes plus one sorted set per index."""

    def __init__(self, redis: Redis, name: str) -> None:  # type: ignore[type-arg]
        """Initialize with a redis-py client and the bucket name."""
        self._redis = redis
        self.name = name

    def _object_key(self, key: str) -> str:
        return f"{self.name}:objects:{key}"

    def _index_key(self, index: str) -> str:
        return f"{self.name}:index:{index}"

    @staticmethod
    def _index_names(pipe: Pipeline, object_key: str) -> list[str]:
        """Names of the indexes recorded on a watched hash."""
        names = []
        for field_name in map(_text, pipe.hkeys(object_key)):
            if field_name.startswith(INDEX_FIELD_PREFIX):
                names.append(field_name[len(INDEX_FIELD_PREFIX) :])
        return names

    def get(self, key: str) -> FetchResult:
        """Fetch the record at ``key``, reporting redis errors as Failure."""
        try:
            raw = self._redis.hgetall(self._object_key(key))
        except RedisError as exc:
            return Failure(exc)
        if not raw:
            return NotFound()
        try:
            return Found(_decode_record(key, raw))
        except MalformedRecordError as exc:
            logger.warning("malformed_record", bucket=self.name, key=key, reason=str(exc))
            return NotFound()

    def get_or_new(self, key: str) -> StoreRecord | None:
        """Fetch the record at ``key``, a fresh one, or None if unusable."""
        raw = self._redis.hgetall(self._object_key(key))
        if not raw:
            return StoreRecord(key=key)
        try:
            return _decode_record(key, raw)
        except MalformedRecordError as exc:
            logger.warning("malformed_write_target", bucket=self.name, key=key, reason=str(exc))
            return None

    def store(self, record: StoreRecord) -> StoreRecord:
        """Replace the hash and move the key within each index.

        The hash is WATCHed while its current index names are read, so a
        concurrent write to the same key makes redis-py retry the whole
        replacement.
        """
        object_key = self._object_key(record.key)

        def _replace(pipe: Pipeline) -> None:
            stale = [n for n in self._index_names(pipe, object_key) if n not in record.indexes]
            pipe.multi()
            pipe.delete(object_key)
            pipe.hset(object_key, mapping=_encode_record(record))
            for name, value in record.indexes.items():
                pipe.zadd(self._index_key(name), {record.key: int(value)})
            for name in stale:
                pipe.zrem(self._index_key(name), record.key)

        self._redis.transaction(_replace, object_key)
        return record

    def delete(self, key: str) -> None:
        """Remove the hash and the key's index entries under WATCH."""
        object_key = self._object_key(key)

        def _remove(pipe: Pipeline) -> None:
            names = self._index_names(pipe, object_key)
            pipe.multi()
            for name in names:
                pipe.zrem(self._index_key(name), key)
            pipe.delete(object_key)

        self._redis.transaction(_remove, object_key)

    def get_index(self, index: str, start: int, end: int) -> list[str]:
        """Range-query a sorted-set index; ``end`` is exclusive."""
        if start == end:
            return []
        index_key = self._index_key(index)
        if start > end:
            members = self._redis.zrevrangebyscore(index_key, max=start, min=f"({end}")
        else:
            members = self._redis.zrangebyscore(index_key, min=start, max=f"({end}")
        return [_text(member) for member in members]


class RedisStoreClient:
    """Store client on top of a synchronous redis-py connection."""

    def __init__(self, redis: Redis) -> None:  # type: ignore[type-arg]
        """Initialize with a redis-py client."""
        self._redis = redis

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> RedisStoreClient:
        """Build a client from connection options.

        ``url`` goes to ``Redis.from_url``; every other option is passed to
        redis-py unchanged.
        """
        opts = dict(options)
        url = opts.pop("url", None)
        if url:
            return cls(Redis.from_url(url, **opts))
        return cls(Redis(**opts))

    def bucket(self, name: str) -> RedisBucket:
        """Return the bucket called ``name``."""
        return RedisBucket(self._redis, name)

    def close(self) -> None:
        """Close the underlying connection pool."""
        self._redis.close()
