"""Key/value store capability consumed by the cache connection.

The connector only needs a bucket that can fetch, create, persist and
delete records by key, plus range queries over named integer secondary
indexes. Fetches report their outcome as one of three result variants so
callers never inspect error messages or record types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from storehouse_core.constants import JSON_CONTENT_TYPE


@dataclass
class StoreRecord:
    """A stored object: content type, document body and secondary indexes."""

    key: str
    content_type: str = JSON_CONTENT_TYPE
    body: dict[str, Any] = field(default_factory=dict)
    indexes: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class Found:
    """The key exists and holds a well-formed record."""

    record: StoreRecord


@dataclass(frozen=True)
class NotFound:
    """The key does not exist, or holds something that is not a record."""


@dataclass(frozen=True)
class Failure:
    """The store could not answer; ``error`` is the client's own exception."""

    error: Exception


FetchResult = Found | NotFound | Failure


@runtime_checkable
class StoreBucket(Protocol):
    """A namespaced container of records."""

    name: str

    def get(self, key: str) -> FetchResult:
        """Fetch the record stored at ``key``."""
        ...

    def get_or_new(self, key: str) -> StoreRecord | None:
        """Fetch the record at ``key`` or a fresh unsaved one.

        Returns None when the key holds an object that cannot be
        overwritten as a record.
        """
        ...

    def store(self, record: StoreRecord) -> StoreRecord:
        """Persist body and indexes, replacing whatever was stored."""
        ...

    def delete(self, key: str) -> None:
        """Remove a key and its index entries. Missing keys are a no-op."""
        ...

    def get_index(self, index: str, start: int, end: int) -> list[str]:
        """Return keys whose ``index`` value lies in ``[start, end)``.

        When ``start > end`` the range runs downwards and keys come back
        in descending index order.
        """
        ...


@runtime_checkable
class StoreClient(Protocol):
    """Connection to a store, handing out buckets by name."""

    def bucket(self, name: str) -> StoreBucket:
        """Return the bucket called ``name``."""
        ...

    def close(self) -> None:
        """Release connections held by the client."""
        ...
