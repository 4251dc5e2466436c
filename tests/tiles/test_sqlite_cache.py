"""Tests for SQLiteTileCache."""

from __future__ import annotations

from datetime import timedelta

import pytest

from shared.errors import CacheWriteError
from tiles.cache import PersistentCache
from tiles.index import TileIndex
from tiles.sqlite_cache import CacheStats, SQLiteTileCache, TileEntryInfo

INDEX = TileIndex(15, 100, 200)


@pytest.fixture
def cache(temp_cache_dir, clock):
    """Create SQLiteTileCache instance."""
    tc = SQLiteTileCache(temp_cache_dir, timedelta(hours=1), clock)
    yield tc
    tc.close()


class TestSQLiteTileCache:
    """Tests for SQLiteTileCache class."""

    def test_satisfies_protocol(self, cache):
        assert isinstance(cache, PersistentCache)

    def test_directory_gets_default_db_name(self, cache, temp_cache_dir):
        assert cache.db_path == temp_cache_dir / 'tiles.db'
        assert cache.db_path.exists()

    def test_explicit_db_file(self, temp_cache_dir):
        with SQLiteTileCache(temp_cache_dir / 'sub' / 'osm.sqlite') as tc:
            assert tc.db_path.name == 'osm.sqlite'

    def test_put_and_get(self, cache):
        """Test basic put and get operations."""
        cache.put(INDEX, b'test tile data')
        assert cache.get(INDEX) == b'test tile data'

    def test_get_nonexistent_returns_none(self, cache):
        assert cache.get(TileIndex(15, 999, 999)) is None

    def test_put_updates_existing(self, cache):
        cache.put(INDEX, b'old')
        cache.put(INDEX, b'new')
        assert cache.get(INDEX) == b'new'
        assert cache.get_stats().total_tiles == 1

    def test_different_levels(self, cache):
        cache.put(TileIndex(14, 100, 200), b'z14')
        cache.put(TileIndex(15, 100, 200), b'z15')
        assert cache.get(TileIndex(14, 100, 200)) == b'z14'
        assert cache.get(TileIndex(15, 100, 200)) == b'z15'

    def test_exists_and_delete(self, cache):
        assert not cache.exists(INDEX)
        cache.put(INDEX, b'data')
        assert cache.exists(INDEX)
        cache.delete(INDEX)
        assert not cache.exists(INDEX)

    def test_get_info(self, cache, clock):
        cache.put(INDEX, b'12345')
        info = cache.get_info(INDEX)
        assert isinstance(info, TileEntryInfo)
        assert info.level == '15'
        assert info.size_bytes == 5
        assert info.fetched_at == pytest.approx(clock.now)

    def test_get_updates_last_used(self, cache, clock):
        cache.put(INDEX, b'x')
        clock.advance(10)
        cache.get(INDEX)
        info = cache.get_info(INDEX)
        assert info.last_used_at == pytest.approx(info.fetched_at + 10)

    def test_put_batch(self, cache):
        cache.put_batch([(TileIndex(1, 0, 0), b'a'), (TileIndex(1, 1, 0), b'b')])
        assert cache.get(TileIndex(1, 1, 0)) == b'b'
        cache.put_batch([])

    def test_get_stats(self, cache):
        cache.put(TileIndex(1, 0, 0), b'aa')
        cache.put(TileIndex(2, 0, 0), b'bbb')
        cache.put(TileIndex(2, 1, 0), b'c')
        stats = cache.get_stats()
        assert isinstance(stats, CacheStats)
        assert stats.total_tiles == 3
        assert stats.total_size_bytes == 6
        assert stats.tiles_by_level == {'1': 1, '2': 2}
        assert stats.size_by_level == {'1': 2, '2': 4}

    def test_cleanup_lru_removes_least_recently_used(self, cache, clock):
        cache.put(TileIndex(1, 0, 0), b'a' * 1024)
        clock.advance(1)
        cache.put(TileIndex(1, 1, 0), b'b' * 1024)
        clock.advance(1)
        cache.get(TileIndex(1, 0, 0))
        freed = cache.cleanup_lru(max_size_mb=0)
        assert freed == 2048
        assert cache.get_stats().total_tiles == 0

    def test_cleanup_lru_under_limit(self, cache):
        cache.put(INDEX, b'x')
        assert cache.cleanup_lru(max_size_mb=1) == 0

    def test_write_after_close_raises(self, temp_cache_dir):
        tc = SQLiteTileCache(temp_cache_dir)
        tc.close()
        with pytest.raises(CacheWriteError):
            tc.put(INDEX, b'x')


class TestSQLiteExpiration:
    """Expiration uses the stored fetch time."""

    def test_valid_before_horizon(self, cache, clock):
        cache.put(INDEX, b'x')
        clock.advance(59 * 60)
        assert cache.get(INDEX) == b'x'

    def test_expired_after_horizon(self, cache, clock):
        cache.put(INDEX, b'x')
        clock.advance(61 * 60)
        assert cache.get(INDEX) is None
        assert cache.get_info(INDEX) is None

    def test_purge_expired(self, cache, clock):
        cache.put(TileIndex(1, 0, 0), b'old')
        clock.advance(30 * 60)
        cache.put(TileIndex(1, 1, 0), b'new')
        clock.advance(40 * 60)
        assert cache.purge_expired() == 1
        assert cache.exists(TileIndex(1, 1, 0))


class TestSQLiteAsync:
    """Async interface used by tile sources."""

    @pytest.mark.asyncio
    async def test_store_and_lookup(self, cache):
        await cache.store(INDEX, b'x')
        assert await cache.lookup(INDEX) == b'x'
        await cache.remove(INDEX)
        assert await cache.lookup(INDEX) is None
