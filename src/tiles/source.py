"""Tile source: persistent cache in front of a tile provider.

Per request:
    lookup -> hit: return cached bytes
           -> miss/expired: fetch -> store (best effort) -> return fetched bytes
    fetch failure propagates and leaves the cache untouched.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from shared.constants import DOWNLOAD_CONCURRENCY
from shared.errors import CacheReadCorruptError, TileError
from tiles.index import TileIndex, TileInfo

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from tiles.cache import PersistentCache
    from tiles.fetcher import TileProvider
    from tiles.schema import TileSchema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Attribution:
    text: str = ''
    url: str = ''


class CachingTileSource:
    """Serves tiles of one schema from ``cache``, falling back to ``provider``.

    ``provider`` is any object with ``async fetch(index) -> bytes``: a
    TileFetcher for remote sources, a FileTileProvider for local
    directories, or a test double. Without a cache every request goes
    straight to the provider.
    """

    def __init__(
        self,
        schema: TileSchema,
        provider: TileProvider,
        cache: PersistentCache | None = None,
        *,
        name: str | None = None,
        attribution: Attribution | None = None,
    ) -> None:
        self.schema = schema
        self.provider = provider
        self.cache = cache
        self.name = name or schema.name
        self.attribution = attribution or Attribution()
        self._stats_cache_hits = 0
        self._stats_cache_misses = 0
        self._stats_downloads = 0
        self._stats_errors = 0
        self._stats_cache_write_failures = 0

    def __repr__(self) -> str:
        return f'[TileSource:{self.name}]'

    @property
    def stats(self) -> dict[str, int]:
        return {
            'cache_hits': self._stats_cache_hits,
            'cache_misses': self._stats_cache_misses,
            'downloads': self._stats_downloads,
            'errors': self._stats_errors,
            'cache_write_failures': self._stats_cache_write_failures,
        }

    async def get_tile(
        self,
        tile: TileInfo | TileIndex,
        *,
        force_download: bool = False,
    ) -> bytes:
        """Raw bytes of one tile.

        Raises InvalidIndexError before touching cache or provider when the
        index is outside the schema. Provider errors (FetchFailedError,
        TileNotFoundError) propagate.
        """
        index = tile.index if isinstance(tile, TileInfo) else tile
        self.schema.validate_index(index)

        if self.cache is not None and not force_download:
            data = await self._lookup(index)
            if data is not None:
                self._stats_cache_hits += 1
                return data
            self._stats_cache_misses += 1

        try:
            data = await self.provider.fetch(index)
        except TileError:
            self._stats_errors += 1
            raise
        self._stats_downloads += 1

        if self.cache is not None:
            await self._store(index, data)
        return data

    async def _lookup(self, index: TileIndex) -> bytes | None:
        try:
            return await self.cache.lookup(index)
        except CacheReadCorruptError as exc:
            logger.warning('%s; treating as cache miss', exc)
            return None

    async def _store(self, index: TileIndex, data: bytes) -> None:
        try:
            await self.cache.store(index, data)
        except OSError as exc:
            # CacheWriteError is an OSError
            self._stats_cache_write_failures += 1
            logger.warning('Cache write failed for tile %s: %s', index, exc)

    async def fetch_many(
        self,
        tiles: Iterable[TileInfo | TileIndex],
        *,
        concurrency: int = DOWNLOAD_CONCURRENCY,
        skip_failed: bool = False,
        on_progress: Callable[[int], Awaitable[None]] | None = None,
    ) -> dict[TileIndex, bytes]:
        """Fetch many tiles concurrently, returning a dict keyed by index.

        With ``skip_failed`` failing tiles are logged and left out; otherwise
        the first failure propagates and the remaining requests are cancelled
        before it does.
        """
        sem = asyncio.Semaphore(concurrency)
        out: dict[TileIndex, bytes] = {}

        async def _worker(tile: TileInfo | TileIndex) -> None:
            index = tile.index if isinstance(tile, TileInfo) else tile
            async with sem:
                try:
                    out[index] = await self.get_tile(index)
                except TileError as exc:
                    if not skip_failed:
                        raise
                    logger.warning('Skipping tile %s: %s', index, exc)
            if on_progress:
                await on_progress(1)

        tasks = [asyncio.ensure_future(_worker(t)) for t in tiles]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return out

    async def close(self) -> None:
        close = getattr(self.provider, 'close', None)
        if close is not None:
            await close()

    async def __aenter__(self) -> CachingTileSource:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
