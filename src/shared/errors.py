"""Exceptions raised by the tile engine.

Only FetchFailedError, TileNotFoundError and InvalidIndexError reach the
caller of a tile request. CacheWriteError and CacheReadCorruptError are
absorbed by the tile sources (logged, request continues).
SchemaConfigurationError is raised once, while building a schema, cache or
fetcher.
"""

from __future__ import annotations


class TileError(Exception):
    """Base class for all tile engine errors."""


class SchemaConfigurationError(TileError, ValueError):
    """Invalid schema, URL template or cache location."""


class InvalidIndexError(TileError, ValueError):
    """Tile index outside of the schema (unknown level or col/row range)."""

    def __init__(self, index: object, reason: str) -> None:
        self.index = index
        self.reason = reason
        super().__init__(f'Invalid tile index {index}: {reason}')


class CacheWriteError(TileError, OSError):
    """Writing a tile to the persistent cache failed."""


class CacheReadCorruptError(TileError):
    """A cached entry exists but cannot be read back."""


class FetchFailedError(TileError, RuntimeError):
    """Remote tile retrieval failed (non-success status or transport error)."""

    def __init__(
        self,
        url: str,
        cause: BaseException | str | None = None,
        status: int | None = None,
    ) -> None:
        self.url = url
        self.cause = cause
        self.status = status
        if status is not None:
            msg = f'Tile fetch failed (HTTP {status}) url={url}'
        else:
            msg = f'Tile fetch failed url={url}: {cause}'
        super().__init__(msg)


class TileNotFoundError(TileError, FileNotFoundError):
    """Tile is absent from a local (file based) tile source."""

    def __init__(self, index: object, location: object = None) -> None:
        self.index = index
        self.location = location
        msg = f'The tile {index} was not found at its expected location'
        if location is not None:
            msg = f'{msg}: {location}'
        super().__init__(msg)
