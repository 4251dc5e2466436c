"""Tile identifiers: (level, col, row) index, quadkeys and request info."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from shared.errors import InvalidIndexError

if TYPE_CHECKING:
    from tiles.extent import Extent

Level = int | str


@dataclass(frozen=True)
class TileIndex:
    """Immutable tile address. Used as cache key and fetch key.

    Persistent caches key the level by its text form, so within one cache
    the levels of a schema must have distinct str() values: 3 and '3' name
    the same stored tile.
    """

    level: Level
    col: int
    row: int

    def __str__(self) -> str:
        return f'{self.level}/{self.col}/{self.row}'

    @property
    def zoom(self) -> int:
        """Level as an integer zoom (for quadtree addressed schemes)."""
        try:
            return int(self.level)
        except (TypeError, ValueError):
            msg = 'level is not an integer zoom'
            raise InvalidIndexError(self, msg) from None

    def to_quadkey(self) -> str:
        """Encode level, col and row as a Bing style quadkey."""
        zoom = self.zoom
        if zoom < 0 or self.col < 0 or self.row < 0:
            msg = 'quadkey needs non-negative level, col and row'
            raise InvalidIndexError(self, msg)
        if self.col >= 2**zoom or self.row >= 2**zoom:
            msg = f'col/row out of range for zoom {zoom}'
            raise InvalidIndexError(self, msg)

        digits = []
        for i in range(zoom, 0, -1):
            mask = 1 << (i - 1)
            digit = 0
            if self.col & mask:
                digit += 1
            if self.row & mask:
                digit += 2
            digits.append(str(digit))
        return ''.join(digits)

    @classmethod
    def from_quadkey(cls, quadkey: str) -> TileIndex:
        col = row = 0
        zoom = len(quadkey)
        for i, ch in enumerate(quadkey):
            mask = 1 << (zoom - i - 1)
            if ch == '1':
                col |= mask
            elif ch == '2':
                row |= mask
            elif ch == '3':
                col |= mask
                row |= mask
            elif ch != '0':
                msg = f'invalid quadkey digit {ch!r}'
                raise InvalidIndexError(quadkey, msg)
        return cls(zoom, col, row)


@dataclass(frozen=True)
class TileInfo:
    """Tile request descriptor. The extent is informational only."""

    index: TileIndex
    extent: Extent
