"""Per-level tile grid math."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from shared.constants import YAxis
from shared.errors import SchemaConfigurationError
from tiles.extent import Extent

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tiles.index import Level


@dataclass(frozen=True)
class TileRange:
    """Inclusive rectangular block of columns and rows at one level."""

    first_col: int
    first_row: int
    last_col: int
    last_row: int

    @property
    def col_count(self) -> int:
        return self.last_col - self.first_col + 1

    @property
    def row_count(self) -> int:
        return self.last_row - self.first_row + 1

    def __len__(self) -> int:
        return self.col_count * self.row_count

    def __iter__(self) -> Iterator[tuple[int, int]]:
        for row in range(self.first_row, self.last_row + 1):
            for col in range(self.first_col, self.last_col + 1):
                yield col, row

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, tuple) or len(item) != 2:  # noqa: PLR2004
            return False
        col, row = item
        return (
            self.first_col <= col <= self.last_col
            and self.first_row <= row <= self.last_row
        )


@dataclass(frozen=True)
class TileMatrix:
    """Grid definition of one zoom level.

    Tile (col, row) covers ``origin + col * tile_width * resolution`` along x;
    along y rows grow away from the origin, downward for TOP_LEFT and upward
    for BOTTOM_LEFT.
    """

    identifier: Level
    resolution: float
    origin_x: float
    origin_y: float
    matrix_width: int
    matrix_height: int
    tile_width: int = 256
    tile_height: int = 256
    y_axis: YAxis = YAxis.TOP_LEFT

    def __post_init__(self) -> None:
        if not self.resolution > 0:
            msg = f'Level {self.identifier}: resolution must be > 0, got {self.resolution}'
            raise SchemaConfigurationError(msg)
        if self.matrix_width < 1 or self.matrix_height < 1:
            msg = (
                f'Level {self.identifier}: matrix size must be >= 1, '
                f'got {self.matrix_width}x{self.matrix_height}'
            )
            raise SchemaConfigurationError(msg)
        if self.tile_width < 1 or self.tile_height < 1:
            msg = (
                f'Level {self.identifier}: tile size must be >= 1 px, '
                f'got {self.tile_width}x{self.tile_height}'
            )
            raise SchemaConfigurationError(msg)

    @property
    def tile_span_x(self) -> float:
        """Tile width in schema units."""
        return self.tile_width * self.resolution

    @property
    def tile_span_y(self) -> float:
        return self.tile_height * self.resolution

    @property
    def extent(self) -> Extent:
        """Extent covered by the whole grid."""
        return self._cells_to_extent(0, 0, self.matrix_width, self.matrix_height)

    def contains(self, col: int, row: int) -> bool:
        return 0 <= col < self.matrix_width and 0 <= row < self.matrix_height

    def tile_to_extent(self, col: int, row: int) -> Extent:
        return self._cells_to_extent(col, row, col + 1, row + 1)

    def _cells_to_extent(self, col0: int, row0: int, col1: int, row1: int) -> Extent:
        # Edges are computed from integer cell boundaries so neighbouring
        # tiles share bit-identical edges.
        min_x = self.origin_x + col0 * self.tile_span_x
        max_x = self.origin_x + col1 * self.tile_span_x
        if self.y_axis == YAxis.TOP_LEFT:
            max_y = self.origin_y - row0 * self.tile_span_y
            min_y = self.origin_y - row1 * self.tile_span_y
        else:
            min_y = self.origin_y + row0 * self.tile_span_y
            max_y = self.origin_y + row1 * self.tile_span_y
        return Extent(min_x, min_y, max_x, max_y)

    def extent_to_range(self, extent: Extent) -> TileRange | None:
        """Smallest block of tiles intersecting ``extent``, clamped to the grid.

        Column/row boundaries are floored, never rounded. Tiles are half-open
        at the max edge: a tile whose min edge only touches the extent's max
        edge is left out, although Extent.intersects reports the closed
        contact. A zero-area extent gives the tile containing the point.
        Returns None when the extent does not touch the grid.
        """
        if not self.extent.intersects(extent):
            return None

        span_x = self.tile_span_x
        span_y = self.tile_span_y
        first_col = math.floor((extent.min_x - self.origin_x) / span_x)
        last_col = math.ceil((extent.max_x - self.origin_x) / span_x) - 1
        if self.y_axis == YAxis.TOP_LEFT:
            first_row = math.floor((self.origin_y - extent.max_y) / span_y)
            last_row = math.ceil((self.origin_y - extent.min_y) / span_y) - 1
        else:
            first_row = math.floor((extent.min_y - self.origin_y) / span_y)
            last_row = math.ceil((extent.max_y - self.origin_y) / span_y) - 1

        first_col = _clamp(first_col, self.matrix_width)
        first_row = _clamp(first_row, self.matrix_height)
        last_col = max(_clamp(last_col, self.matrix_width), first_col)
        last_row = max(_clamp(last_row, self.matrix_height), first_row)
        return TileRange(first_col, first_row, last_col, last_row)


def _clamp(value: int, size: int) -> int:
    return min(max(value, 0), size - 1)
