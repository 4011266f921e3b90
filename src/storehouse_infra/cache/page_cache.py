"""Page content cache on top of the indexed connection."""

from __future__ import annotations

from typing import Any

from storehouse_core.constants import CREATED_AT_FIELD, EXPIRES_AT_FIELD
from storehouse_core.interfaces.store import StoreRecord
from storehouse_core.models.entry import CacheEntry
from storehouse_infra.cache.connection import IndexedConnection


class PageCache:
    """Cache for rendered page content, keyed by request path."""

    def __init__(self, connection: IndexedConnection, default_ttl_seconds: int = 86400) -> None:
        """Initialize with a connection and the TTL used when none is given."""
        self._connection = connection
        self._default_ttl = default_ttl_seconds

    def get_page(self, path: str) -> dict[str, Any] | None:
        """Return the cached page, or None if it is missing or stale."""
        data = self._connection.read(path)
        if not data:
            return None
        if data[EXPIRES_AT_FIELD] <= self._connection.now():
            return None
        return data

    def set_page(
        self,
        path: str,
        content: str,
        ttl_seconds: int | None = None,
        **fields: Any,  # noqa: ANN401
    ) -> StoreRecord | None:
        """Cache page content with extra fields such as headers or status."""
        now = self._connection.now()
        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        payload = {k: v for k, v in fields.items() if k not in (CREATED_AT_FIELD, EXPIRES_AT_FIELD)}
        payload["content"] = content
        entry = CacheEntry(key=path, payload=payload, created_at=now, expires_at=now + ttl)
        return self._connection.write(path, entry)

    def expire_page(self, path: str) -> StoreRecord | None:
        """Mark a page stale without removing it."""
        return self._connection.expire(path)

    def delete_page(self, path: str) -> dict[str, Any] | None:
        """Remove a page and return what was cached."""
        return self._connection.delete(path)
