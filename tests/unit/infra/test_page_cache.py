"""Tests for the PageCache wrapper."""

from __future__ import annotations

import pytest

from storehouse_infra.cache.connection import IndexedConnection
from storehouse_infra.cache.page_cache import PageCache
from tests.mocks.mock_store import NOW, FixedClock


@pytest.mark.unit
class TestPageCache:
    """Tests for PageCache over an in-memory connection."""

    def test_set_and_get_page(self, connection: IndexedConnection) -> None:
        """Cached pages come back with content, extra fields and timestamps."""
        cache = PageCache(connection, default_ttl_seconds=600)
        cache.set_page("/jobs", "<html>jobs</html>", status=200)

        assert cache.get_page("/jobs") == {
            "content": "<html>jobs</html>",
            "status": 200,
            "created_at": NOW,
            "expires_at": NOW + 600,
        }

    def test_explicit_ttl(self, connection: IndexedConnection) -> None:
        """ttl_seconds overrides the default."""
        cache = PageCache(connection, default_ttl_seconds=600)
        cache.set_page("/jobs", "x", ttl_seconds=5)
        page = cache.get_page("/jobs")
        assert page is not None
        assert page["expires_at"] == NOW + 5

    def test_reserved_fields_are_ignored(self, connection: IndexedConnection) -> None:
        """Callers cannot smuggle timestamps through extra fields."""
        cache = PageCache(connection, default_ttl_seconds=600)
        cache.set_page("/jobs", "x", expires_at=1)
        page = cache.get_page("/jobs")
        assert page is not None
        assert page["expires_at"] == NOW + 600

    def test_stale_page_is_none(self, connection: IndexedConnection, clock: FixedClock) -> None:
        """A page past its expiry reads as missing but is still stored."""
        cache = PageCache(connection, default_ttl_seconds=600)
        cache.set_page("/jobs", "x")
        clock.advance(601)
        assert cache.get_page("/jobs") is None
        assert connection.read("/jobs") != {}

    def test_expire_page(self, connection: IndexedConnection) -> None:
        """expire_page makes the page stale immediately."""
        cache = PageCache(connection)
        cache.set_page("/jobs", "x")
        assert cache.expire_page("/jobs") is not None
        assert cache.get_page("/jobs") is None

    def test_delete_page(self, connection: IndexedConnection) -> None:
        """delete_page returns the cached page and removes it."""
        cache = PageCache(connection)
        cache.set_page("/jobs", "x")
        deleted = cache.delete_page("/jobs")
        assert deleted is not None
        assert deleted["content"] == "x"
        assert connection.read("/jobs") == {}

    def test_get_page_miss(self, connection: IndexedConnection) -> None:
        """Missing page returns None."""
        assert PageCache(connection).get_page("/missing") is None
