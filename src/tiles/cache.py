"""Persistent tile caches with time based expiration.

This module provides:
- PersistentCache: the interface tile sources rely on
- BaseTileCache: shared expiration and async plumbing
- FileTileCache: one file per tile under <root>/<level>/<col>/<row>.<format>
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import math
import os
import re
import tempfile
import time
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable
from urllib.parse import quote

from shared.constants import DEFAULT_TILE_FORMAT, TILE_CACHE_TMP_SUFFIX
from shared.errors import (
    CacheReadCorruptError,
    CacheWriteError,
    SchemaConfigurationError,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from tiles.index import Level, TileIndex

logger = logging.getLogger(__name__)

_FORMAT_RE = re.compile(r'[A-Za-z0-9]+')

ExpireAfter = timedelta | float | int | None


@runtime_checkable
class PersistentCache(Protocol):
    """What a tile source needs from a cache.

    lookup returns None for missing, expired and unreadable entries.
    store raises CacheWriteError on failure.
    """

    async def lookup(self, index: TileIndex) -> bytes | None: ...

    async def store(self, index: TileIndex, data: bytes) -> None: ...

    async def remove(self, index: TileIndex) -> None: ...


def normalize_expire_after(expire_after: ExpireAfter) -> float | None:
    """Expiration horizon in seconds; None means entries never expire."""
    if expire_after is None:
        return None
    if isinstance(expire_after, timedelta):
        seconds = expire_after.total_seconds()
    else:
        seconds = float(expire_after)
    if seconds < 0 or math.isnan(seconds):
        msg = f'Cache expiration must be >= 0, got {expire_after!r}'
        raise SchemaConfigurationError(msg)
    if seconds == 0 or math.isinf(seconds):
        return None
    return seconds


class BaseTileCache:
    """Expiration check plus async wrappers around the blocking get/put/delete.

    Blocking I/O runs in the default executor so many concurrent requests
    never stall the event loop.
    """

    def __init__(
        self,
        expire_after: ExpireAfter = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.expire_after = normalize_expire_after(expire_after)
        self._clock = clock

    def is_expired(self, written_at: float) -> bool:
        if self.expire_after is None:
            return False
        return self._clock() - written_at >= self.expire_after

    def get(self, index: TileIndex) -> bytes | None:
        raise NotImplementedError

    def put(self, index: TileIndex, data: bytes) -> None:
        raise NotImplementedError

    def delete(self, index: TileIndex) -> None:
        raise NotImplementedError

    async def lookup(self, index: TileIndex) -> bytes | None:
        return await asyncio.to_thread(self.get, index)

    async def store(self, index: TileIndex, data: bytes) -> None:
        await asyncio.to_thread(self.put, index, data)

    async def remove(self, index: TileIndex) -> None:
        await asyncio.to_thread(self.delete, index)


def encode_level(level: Level) -> str:
    """Level identifier as a single safe path segment.

    Percent-encoding is injective, so distinct identifiers never share a
    directory.
    """
    text = quote(str(level), safe='')
    if text in ('', '.', '..'):
        text = text.replace('.', '%2E') or '%00'
    return text


class FileTileCache(BaseTileCache):
    """Directory backed cache; the file mtime is the write timestamp.

    Writes go to a temporary file in the target directory and are published
    with os.replace, so a lookup never sees a partial tile.

    A read_only cache serves a directory it does not own: the directory is
    not created, and expired or corrupt entries are reported as misses but
    never removed. Writes raise CacheWriteError.

    Usage:
        cache = FileTileCache('/var/cache/osm', 'png', timedelta(days=7))
        await cache.store(TileIndex(3, 4, 2), data)
        data = await cache.lookup(TileIndex(3, 4, 2))
    """

    def __init__(
        self,
        directory: str | Path,
        format: str = DEFAULT_TILE_FORMAT,  # noqa: A002
        expire_after: ExpireAfter = None,
        clock: Callable[[], float] = time.time,
        *,
        read_only: bool = False,
    ) -> None:
        super().__init__(expire_after, clock)
        if not _FORMAT_RE.fullmatch(format):
            msg = f'Invalid tile format tag {format!r}'
            raise SchemaConfigurationError(msg)
        self.format = format
        self.directory = Path(directory)
        self.read_only = read_only
        if not read_only:
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                msg = f'Cannot use {self.directory} as tile cache directory: {exc}'
                raise SchemaConfigurationError(msg) from exc
        logger.info(
            'FileTileCache initialized at %s (format=%s, expire_after=%s, read_only=%s)',
            self.directory,
            self.format,
            self.expire_after,
            self.read_only,
        )

    def entry_path(self, index: TileIndex) -> Path:
        return (
            self.directory
            / encode_level(index.level)
            / str(index.col)
            / f'{index.row}.{self.format}'
        )

    def get(self, index: TileIndex) -> bytes | None:
        path = self.entry_path(index)
        try:
            written_at = path.stat().st_mtime
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning('Cannot stat cache entry %s: %s', path, exc)
            return None

        if self.is_expired(written_at):
            logger.debug('Cache entry %s expired', index)
            self._discard(path)
            return None

        try:
            return self._read_entry(path)
        except CacheReadCorruptError as exc:
            logger.warning('%s; treating as cache miss', exc)
            self._discard(path)
            return None

    def _read_entry(self, path: Path) -> bytes:
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            # Removed between stat and read
            msg = f'Cache entry {path} vanished while reading'
            raise CacheReadCorruptError(msg) from None
        except OSError as exc:
            msg = f'Unreadable cache entry {path}: {exc}'
            raise CacheReadCorruptError(msg) from exc
        if not data:
            msg = f'Empty cache entry {path}'
            raise CacheReadCorruptError(msg)
        return data

    def written_at(self, index: TileIndex) -> float | None:
        """Write timestamp of an entry, expired or not."""
        try:
            return self.entry_path(index).stat().st_mtime
        except OSError:
            return None

    def exists(self, index: TileIndex) -> bool:
        written_at = self.written_at(index)
        return written_at is not None and not self.is_expired(written_at)

    def put(self, index: TileIndex, data: bytes) -> None:
        path = self.entry_path(index)
        self._check_writable(index, path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent,
                prefix=f'.{path.name}.',
                suffix=TILE_CACHE_TMP_SUFFIX,
            )
            try:
                with os.fdopen(fd, 'wb') as fh:
                    fh.write(data)
                now = self._clock()
                os.utime(tmp_name, (now, now))
                os.replace(tmp_name, path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            msg = f'Failed to write tile {index} to {path}: {exc}'
            raise CacheWriteError(msg) from exc

    def delete(self, index: TileIndex) -> None:
        path = self.entry_path(index)
        self._check_writable(index, path)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            msg = f'Failed to remove tile {index} at {path}: {exc}'
            raise CacheWriteError(msg) from exc

    def purge_expired(self) -> int:
        """Remove every expired entry. Returns the number of removed files.

        Expired entries are otherwise only removed when read.
        """
        if self.expire_after is None or self.read_only:
            return 0
        removed = 0
        for path in self.directory.rglob(f'*.{self.format}'):
            try:
                written_at = path.stat().st_mtime
            except OSError:
                continue
            if self.is_expired(written_at) and self._discard(path):
                removed += 1
        logger.info('Purged %d expired tiles from %s', removed, self.directory)
        return removed

    def _check_writable(self, index: TileIndex, path: Path) -> None:
        if self.read_only:
            msg = f'Tile cache {self.directory} is read-only; cannot modify {index} at {path}'
            raise CacheWriteError(msg)

    def _discard(self, path: Path) -> bool:
        if self.read_only:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.debug('Failed to remove cache entry %s: %s', path, exc)
            return False
        return True
