"""Tiles read from a local directory instead of the network."""

from __future__ import annotations

from typing import TYPE_CHECKING

from shared.constants import DEFAULT_TILE_FORMAT
from shared.errors import TileNotFoundError
from tiles.cache import FileTileCache
from tiles.source import CachingTileSource

if TYPE_CHECKING:
    from pathlib import Path

    from tiles.cache import ExpireAfter
    from tiles.index import TileIndex
    from tiles.schema import TileSchema


class FileTileProvider:
    """Reads tiles laid out as <directory>/<level>/<col>/<row>.<format>.

    The directory is source data: from_directory opens it read-only, so
    missing, expired or unreadable tiles raise TileNotFoundError and the
    files are left in place.
    """

    def __init__(self, cache: FileTileCache) -> None:
        self.cache = cache

    @classmethod
    def from_directory(
        cls,
        directory: str | Path,
        format: str = DEFAULT_TILE_FORMAT,  # noqa: A002
        expire_after: ExpireAfter = None,
    ) -> FileTileProvider:
        return cls(FileTileCache(directory, format, expire_after, read_only=True))

    async def fetch(self, index: TileIndex) -> bytes:
        data = await self.cache.lookup(index)
        if data is None:
            raise TileNotFoundError(index, self.cache.entry_path(index))
        return data


def file_tile_source(
    schema: TileSchema,
    directory: str | Path,
    format: str | None = None,  # noqa: A002
    *,
    expire_after: ExpireAfter = None,
    name: str | None = None,
) -> CachingTileSource:
    """Tile source over a local tile directory; no network, no write-back."""
    provider = FileTileProvider.from_directory(
        directory, format or schema.format, expire_after
    )
    return CachingTileSource(schema, provider, cache=None, name=name)
