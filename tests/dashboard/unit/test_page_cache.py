"""
Unit tests for PageCache
"""
from unittest.mock import Mock, patch

from board_meeting.infrastructure.cache.page_cache import PageCache


class TestPageCache:
    def test_set_and_get(self):
        PageCache.set("/agenda/radir", [1, 2])
        assert PageCache.get("/agenda/radir") == [1, 2]
        assert PageCache.get("/agenda/rakordir") is None

    def test_invalidate_prefix_and_query(self):
        PageCache.set("/dashboard?from=2026-01-01&to=2026-01-31", {})
        PageCache.set("/dashboard/extra", {})
        PageCache.set("/dashboards", {})
        removed = PageCache.invalidate("/dashboard")
        assert removed == 2
        assert list(PageCache.keys()) == ["/dashboards"]

    def test_get_or_load_calls_loader_once(self):
        loader = Mock(return_value={"total": 3})
        assert PageCache.get_or_load("/monev/radir", loader) == {"total": 3}
        assert PageCache.get_or_load("/monev/radir", loader) == {"total": 3}
        loader.assert_called_once()

    def test_entries_expire(self):
        PageCache.set("/jadwal-rapat", [])
        stored_at = PageCache._entries["/jadwal-rapat"].stored_at
        with patch("board_meeting.infrastructure.cache.page_cache.time.monotonic",
                   return_value=stored_at + PageCache.ttl_seconds + 1):
            assert PageCache.get("/jadwal-rapat") is None
