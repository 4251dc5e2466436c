"""Tests for local directory tile sources."""

import pytest

from shared.errors import CacheWriteError, InvalidIndexError, TileNotFoundError
from tiles.cache import FileTileCache
from tiles.file_provider import FileTileProvider, file_tile_source
from tiles.index import TileIndex
from tiles.schema import global_spherical_mercator

INDEX = TileIndex(2, 1, 3)


@pytest.fixture
def tile_dir(temp_cache_dir):
    FileTileCache(temp_cache_dir, 'jpg').put(INDEX, b'jpeg-bytes')
    return temp_cache_dir


class TestFileTileProvider:
    """Tests for FileTileProvider."""

    @pytest.mark.asyncio
    async def test_reads_existing_tile(self, tile_dir):
        provider = FileTileProvider.from_directory(tile_dir, 'jpg')
        assert await provider.fetch(INDEX) == b'jpeg-bytes'

    @pytest.mark.asyncio
    async def test_missing_tile_raises_not_found(self, tile_dir):
        provider = FileTileProvider.from_directory(tile_dir, 'jpg')
        with pytest.raises(TileNotFoundError) as exc_info:
            await provider.fetch(TileIndex(2, 0, 0))
        assert isinstance(exc_info.value, FileNotFoundError)
        assert exc_info.value.index == TileIndex(2, 0, 0)
        assert '2/0/0' in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_format_selects_extension(self, tile_dir):
        provider = FileTileProvider.from_directory(tile_dir, 'png')
        with pytest.raises(TileNotFoundError):
            await provider.fetch(INDEX)


class TestFileTileSource:
    """Tests for file_tile_source."""

    @pytest.mark.asyncio
    async def test_get_tile(self, tile_dir):
        schema = global_spherical_mercator(0, 4, format='jpg')
        source = file_tile_source(schema, tile_dir, name='local')
        assert await source.get_tile(INDEX) == b'jpeg-bytes'
        assert source.cache is None

    @pytest.mark.asyncio
    async def test_invalid_index(self, tile_dir):
        source = file_tile_source(global_spherical_mercator(0, 4), tile_dir, 'jpg')
        with pytest.raises(InvalidIndexError):
            await source.get_tile(TileIndex(9, 0, 0))


class TestSourceDataIsNeverModified:
    """The tile directory belongs to the caller."""

    @pytest.mark.asyncio
    async def test_empty_tile_is_not_found_and_kept(self, temp_cache_dir):
        path = temp_cache_dir / '2' / '1' / '3.png'
        path.parent.mkdir(parents=True)
        path.write_bytes(b'')
        provider = FileTileProvider.from_directory(temp_cache_dir, 'png')

        with pytest.raises(TileNotFoundError):
            await provider.fetch(INDEX)

        assert path.exists()

    @pytest.mark.asyncio
    async def test_expired_tile_is_not_found_and_kept(self, tile_dir, clock):
        tile_path = tile_dir / '2' / '1' / '3.jpg'
        clock.now = tile_path.stat().st_mtime + 2 * 3600
        provider = FileTileProvider(
            FileTileCache(tile_dir, 'jpg', 3600, clock, read_only=True)
        )

        with pytest.raises(TileNotFoundError):
            await provider.fetch(INDEX)

        assert tile_path.read_bytes() == b'jpeg-bytes'

    @pytest.mark.asyncio
    async def test_missing_directory_is_not_created(self, temp_cache_dir):
        missing = temp_cache_dir / 'not-there'
        provider = FileTileProvider.from_directory(missing, 'png')

        with pytest.raises(TileNotFoundError):
            await provider.fetch(INDEX)

        assert not missing.exists()

    @pytest.mark.asyncio
    async def test_writes_are_refused(self, tile_dir):
        provider = FileTileProvider.from_directory(tile_dir, 'jpg')
        with pytest.raises(CacheWriteError):
            await provider.cache.store(INDEX, b'other')
        with pytest.raises(CacheWriteError):
            await provider.cache.remove(INDEX)
        assert await provider.fetch(INDEX) == b'jpeg-bytes'
