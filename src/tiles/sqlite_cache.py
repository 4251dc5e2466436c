"""SQLite-based tile cache with expiration and LRU cleanup.

All tiles live in a single database file keyed by (level, col, row).
"""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from shared.constants import TILE_CACHE_DB_NAME, TILE_CACHE_MAX_SIZE_MB
from shared.errors import CacheWriteError, SchemaConfigurationError
from tiles.cache import BaseTileCache

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from tiles.cache import ExpireAfter
    from tiles.index import TileIndex

logger = logging.getLogger(__name__)


@dataclass
class TileEntryInfo:
    """Metadata of a cached tile."""

    level: str
    col: int
    row: int
    size_bytes: int
    fetched_at: float
    last_used_at: float


@dataclass
class CacheStats:
    """Statistics about the tile cache."""

    total_tiles: int
    total_size_bytes: int
    tiles_by_level: dict[str, int]
    size_by_level: dict[str, int]
    oldest_tile: float | None
    newest_tile: float | None


class SQLiteTileCache(BaseTileCache):
    """SQLite tile store.

    Features:
    - WAL mode for concurrent reads
    - Expiration checked on every read, expired rows removed lazily
    - LRU eviction based on total cache size
    - Automatic last_used_at update on reads

    A single connection is shared by the executor threads behind
    lookup/store/remove; a lock serializes access to it.

    Usage:
        with SQLiteTileCache('/var/cache/tiles') as cache:
            cache.put(TileIndex(15, 100, 200), tile_bytes)
            tile_data = cache.get(TileIndex(15, 100, 200))
    """

    def __init__(
        self,
        path: str | Path,
        expire_after: ExpireAfter = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize tile cache.

        Args:
            path: Database file, or a directory that will hold tiles.db.
            expire_after: Expiration horizon; None or 0 disables expiration.
            clock: Time source in epoch seconds.
        """
        super().__init__(expire_after, clock)
        db_path = Path(path)
        if db_path.is_dir() or not db_path.suffix:
            db_path = db_path / TILE_CACHE_DB_NAME
        self.db_path = db_path
        self._lock = threading.Lock()
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.execute('PRAGMA journal_mode=WAL')
            self._conn.execute('PRAGMA synchronous=NORMAL')
            self._init_schema()
        except (OSError, sqlite3.Error) as exc:
            msg = f'Cannot open tile cache database {self.db_path}: {exc}'
            raise SchemaConfigurationError(msg) from exc
        logger.info('SQLiteTileCache initialized at %s', self.db_path)

    def _init_schema(self) -> None:
        self._conn.executescript('''
            CREATE TABLE IF NOT EXISTS tiles (
                level TEXT NOT NULL,
                col INTEGER NOT NULL,
                row INTEGER NOT NULL,
                tile_data BLOB NOT NULL,
                fetched_at REAL NOT NULL,
                last_used_at REAL NOT NULL,
                size_bytes INTEGER NOT NULL,
                PRIMARY KEY (level, col, row)
            );

            CREATE INDEX IF NOT EXISTS idx_tiles_last_used ON tiles(last_used_at);
            CREATE INDEX IF NOT EXISTS idx_tiles_fetched ON tiles(fetched_at);
        ''')
        self._conn.commit()

    @staticmethod
    def _key(index: TileIndex) -> tuple[str, int, int]:
        return str(index.level), index.col, index.row

    def get(self, index: TileIndex) -> bytes | None:
        """Get tile data, or None when missing, expired or unreadable.

        Updates last_used_at for LRU tracking.
        """
        key = self._key(index)
        try:
            with self._lock:
                row = self._conn.execute(
                    'SELECT tile_data, fetched_at FROM tiles '
                    'WHERE level = ? AND col = ? AND row = ?',
                    key,
                ).fetchone()
                if row is None:
                    return None
                data, fetched_at = row
                if self.is_expired(fetched_at):
                    logger.debug('Cache entry %s expired', index)
                    self._conn.execute(
                        'DELETE FROM tiles WHERE level = ? AND col = ? AND row = ?',
                        key,
                    )
                    self._conn.commit()
                    return None
                self._conn.execute(
                    'UPDATE tiles SET last_used_at = ? '
                    'WHERE level = ? AND col = ? AND row = ?',
                    (self._clock(), *key),
                )
                self._conn.commit()
        except sqlite3.Error as exc:
            logger.warning('Unreadable cache entry %s: %s; treating as miss', index, exc)
            return None
        if not data:
            return None
        return bytes(data)

    def get_info(self, index: TileIndex) -> TileEntryInfo | None:
        """Get tile metadata without updating last_used_at."""
        with self._lock:
            row = self._conn.execute(
                '''SELECT level, col, row, size_bytes, fetched_at, last_used_at
                   FROM tiles WHERE level = ? AND col = ? AND row = ?''',
                self._key(index),
            ).fetchone()
        if row is None:
            return None
        return TileEntryInfo(*row)

    def exists(self, index: TileIndex) -> bool:
        info = self.get_info(index)
        return info is not None and not self.is_expired(info.fetched_at)

    def put(self, index: TileIndex, data: bytes) -> None:
        """Store tile, overwriting any previous entry for the index."""
        now = self._clock()
        try:
            with self._lock:
                self._conn.execute(
                    '''INSERT OR REPLACE INTO tiles
                       (level, col, row, tile_data, fetched_at, last_used_at, size_bytes)
                       VALUES (?, ?, ?, ?, ?, ?, ?)''',
                    (*self._key(index), data, now, now, len(data)),
                )
                self._conn.commit()
        except sqlite3.Error as exc:
            msg = f'Failed to write tile {index} to {self.db_path}: {exc}'
            raise CacheWriteError(msg) from exc

    def put_batch(self, tiles: Sequence[tuple[TileIndex, bytes]]) -> None:
        """Store multiple tiles in a single transaction."""
        if not tiles:
            return
        now = self._clock()
        rows = [
            (*self._key(index), data, now, now, len(data)) for index, data in tiles
        ]
        try:
            with self._lock:
                self._conn.executemany(
                    '''INSERT OR REPLACE INTO tiles
                       (level, col, row, tile_data, fetched_at, last_used_at, size_bytes)
                       VALUES (?, ?, ?, ?, ?, ?, ?)''',
                    rows,
                )
                self._conn.commit()
        except sqlite3.Error as exc:
            msg = f'Failed to write {len(rows)} tiles to {self.db_path}: {exc}'
            raise CacheWriteError(msg) from exc

    def delete(self, index: TileIndex) -> None:
        try:
            with self._lock:
                self._conn.execute(
                    'DELETE FROM tiles WHERE level = ? AND col = ? AND row = ?',
                    self._key(index),
                )
                self._conn.commit()
        except sqlite3.Error as exc:
            msg = f'Failed to remove tile {index} from {self.db_path}: {exc}'
            raise CacheWriteError(msg) from exc

    def get_stats(self) -> CacheStats:
        """Totals and per-level breakdown."""
        with self._lock:
            rows = self._conn.execute(
                '''SELECT level, COUNT(*), COALESCE(SUM(size_bytes), 0),
                          MIN(fetched_at), MAX(fetched_at)
                   FROM tiles GROUP BY level'''
            ).fetchall()

        tiles_by_level: dict[str, int] = {}
        size_by_level: dict[str, int] = {}
        oldest_tile: float | None = None
        newest_tile: float | None = None
        for level, count, size, oldest, newest in rows:
            tiles_by_level[level] = count
            size_by_level[level] = size
            if oldest_tile is None or oldest < oldest_tile:
                oldest_tile = oldest
            if newest_tile is None or newest > newest_tile:
                newest_tile = newest

        return CacheStats(
            total_tiles=sum(tiles_by_level.values()),
            total_size_bytes=sum(size_by_level.values()),
            tiles_by_level=tiles_by_level,
            size_by_level=size_by_level,
            oldest_tile=oldest_tile,
            newest_tile=newest_tile,
        )

    def purge_expired(self) -> int:
        """Delete every expired row. Returns the number of removed tiles."""
        if self.expire_after is None:
            return 0
        threshold = self._clock() - self.expire_after
        with self._lock:
            cursor = self._conn.execute(
                'DELETE FROM tiles WHERE fetched_at <= ?', (threshold,)
            )
            self._conn.commit()
        logger.info('Purged %d expired tiles from %s', cursor.rowcount, self.db_path)
        return cursor.rowcount

    def cleanup_lru(self, max_size_mb: int | None = None) -> int:
        """Remove least recently used tiles to stay under size limit.

        Args:
            max_size_mb: Maximum cache size in MB. Defaults to TILE_CACHE_MAX_SIZE_MB.

        Returns:
            Number of bytes freed.
        """
        if max_size_mb is None:
            max_size_mb = TILE_CACHE_MAX_SIZE_MB
        max_size_bytes = max_size_mb * 1024 * 1024
        stats = self.get_stats()
        if stats.total_size_bytes <= max_size_bytes:
            return 0

        bytes_to_free = stats.total_size_bytes - max_size_bytes
        bytes_freed = 0
        victims: list[tuple[str, int, int]] = []
        with self._lock:
            rows = self._conn.execute(
                'SELECT level, col, row, size_bytes FROM tiles ORDER BY last_used_at'
            ).fetchall()
            for level, col, row, size in rows:
                if bytes_freed >= bytes_to_free:
                    break
                victims.append((level, col, row))
                bytes_freed += size
            self._conn.executemany(
                'DELETE FROM tiles WHERE level = ? AND col = ? AND row = ?', victims
            )
            self._conn.commit()

        logger.info(
            'LRU cleanup: freed %.1f MB (target: %.1f MB)',
            bytes_freed / 1024 / 1024,
            bytes_to_free / 1024 / 1024,
        )
        return bytes_freed

    def close(self) -> None:
        with self._lock:
            self._conn.close()
        logger.info('SQLiteTileCache closed')

    def __enter__(self) -> SQLiteTileCache:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
