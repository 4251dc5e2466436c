"""Tile schema: ordered tile matrices plus content extent.

A schema answers which tiles intersect an extent at a level and which level
best matches a requested resolution. It is built once and shared read-only
by every request against a tile source.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from shared.constants import (
    DEFAULT_TILE_FORMAT,
    MAX_ZOOM,
    MERCATOR_HALF_EXTENT_M,
    MERCATOR_SRS,
    MIN_ZOOM,
    TILE_SIZE,
    YAxis,
)
from shared.errors import InvalidIndexError, SchemaConfigurationError
from tiles.extent import Extent
from tiles.index import TileIndex, TileInfo
from tiles.matrix import TileMatrix, TileRange

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tiles.index import Level

logger = logging.getLogger(__name__)

MERCATOR_EXTENT = Extent(
    -MERCATOR_HALF_EXTENT_M,
    -MERCATOR_HALF_EXTENT_M,
    MERCATOR_HALF_EXTENT_M,
    MERCATOR_HALF_EXTENT_M,
)


class TileSchema:
    """Ordered collection of tile matrices keyed by level identifier.

    Insertion order is zoom order: every level must have a strictly smaller
    resolution (finer) than the one before it.
    """

    def __init__(
        self,
        matrices: Iterable[TileMatrix],
        extent: Extent,
        *,
        name: str = 'custom',
        srs: str = MERCATOR_SRS,
        format: str = DEFAULT_TILE_FORMAT,  # noqa: A002
    ) -> None:
        self.name = name
        self.srs = srs
        self.format = format
        self.extent = extent
        self._matrices: dict[Level, TileMatrix] = {}

        previous: TileMatrix | None = None
        for matrix in matrices:
            if matrix.identifier in self._matrices:
                msg = f'Duplicate level {matrix.identifier!r} in schema {name!r}'
                raise SchemaConfigurationError(msg)
            if previous is not None and matrix.resolution >= previous.resolution:
                msg = (
                    f'Schema {name!r}: level {matrix.identifier!r} '
                    f'(resolution {matrix.resolution}) is not finer than '
                    f'level {previous.identifier!r} ({previous.resolution})'
                )
                raise SchemaConfigurationError(msg)
            self._matrices[matrix.identifier] = matrix
            previous = matrix

        if not self._matrices:
            msg = f'Schema {name!r} has no levels'
            raise SchemaConfigurationError(msg)

    def __repr__(self) -> str:
        return (
            f'TileSchema(name={self.name!r}, srs={self.srs!r}, '
            f'levels={len(self._matrices)})'
        )

    @property
    def levels(self) -> list[Level]:
        return list(self._matrices)

    @property
    def matrices(self) -> list[TileMatrix]:
        return list(self._matrices.values())

    def matrix(self, level: Level) -> TileMatrix:
        try:
            return self._matrices[level]
        except KeyError:
            msg = f'Unknown level {level!r} in schema {self.name!r}'
            raise InvalidIndexError(level, msg) from None

    def validate_index(self, index: TileIndex) -> TileMatrix:
        """Return the index's matrix, or raise InvalidIndexError."""
        matrix = self._matrices.get(index.level)
        if matrix is None:
            msg = f'unknown level in schema {self.name!r}'
            raise InvalidIndexError(index, msg)
        if not matrix.contains(index.col, index.row):
            msg = (
                f'col/row outside [0, {matrix.matrix_width - 1}] x '
                f'[0, {matrix.matrix_height - 1}]'
            )
            raise InvalidIndexError(index, msg)
        return matrix

    def tile_to_extent(self, index: TileIndex) -> Extent:
        matrix = self.validate_index(index)
        return matrix.tile_to_extent(index.col, index.row)

    def tile_info(self, index: TileIndex) -> TileInfo:
        return TileInfo(index, self.tile_to_extent(index))

    def get_tile_range(self, extent: Extent, level: Level) -> TileRange | None:
        """Tile block at ``level`` intersecting ``extent`` within the schema extent."""
        matrix = self.matrix(level)
        clipped = self.extent.intersection(extent)
        if clipped is None:
            return None
        return matrix.extent_to_range(clipped)

    def get_tile_indices(self, extent: Extent, level: Level) -> list[TileIndex]:
        tile_range = self.get_tile_range(extent, level)
        if tile_range is None:
            return []
        return [TileIndex(level, col, row) for col, row in tile_range]

    def get_tile_infos(self, extent: Extent, level: Level) -> list[TileInfo]:
        """TileInfo for every tile at ``level`` that intersects ``extent``.

        An extent outside the schema extent yields an empty list.
        """
        matrix = self.matrix(level)
        return [
            TileInfo(index, matrix.tile_to_extent(index.col, index.row))
            for index in self.get_tile_indices(extent, level)
        ]

    def level_for_resolution(self, resolution: float) -> Level:
        """Pick the level closest to ``resolution`` without being coarser.

        Requests finer than the finest level get the finest level; requests
        coarser than every level get the coarsest.
        """
        if not resolution > 0:
            msg = f'resolution must be > 0, got {resolution}'
            raise ValueError(msg)
        matrices = self.matrices
        for matrix in matrices:
            if matrix.resolution <= resolution:
                return matrix.identifier
        return matrices[-1].identifier


def mercator_resolution(zoom: int, tile_size: int = TILE_SIZE) -> float:
    """Web Mercator units per pixel at ``zoom``."""
    return 2 * MERCATOR_HALF_EXTENT_M / tile_size / 2**zoom


def global_spherical_mercator(
    min_zoom: int = MIN_ZOOM,
    max_zoom: int = MAX_ZOOM,
    *,
    extent: Extent | None = None,
    y_axis: YAxis = YAxis.TOP_LEFT,
    format: str = DEFAULT_TILE_FORMAT,  # noqa: A002
    name: str = 'GlobalSphericalMercator',
    tile_size: int = TILE_SIZE,
) -> TileSchema:
    """EPSG:3857 schema with ``2**z x 2**z`` tiles per level.

    ``extent`` narrows the content extent for sources covering a sub-region;
    the grid itself always spans the whole world.
    """
    if min_zoom < 0 or max_zoom < min_zoom:
        msg = f'Invalid zoom range [{min_zoom}, {max_zoom}]'
        raise SchemaConfigurationError(msg)

    if y_axis == YAxis.TOP_LEFT:
        origin_y = MERCATOR_EXTENT.max_y
    else:
        origin_y = MERCATOR_EXTENT.min_y

    matrices = []
    for zoom in range(min_zoom, max_zoom + 1):
        size = 2**zoom
        matrices.append(
            TileMatrix(
                identifier=zoom,
                resolution=mercator_resolution(zoom, tile_size),
                origin_x=MERCATOR_EXTENT.min_x,
                origin_y=origin_y,
                matrix_width=size,
                matrix_height=size,
                tile_width=tile_size,
                tile_height=tile_size,
                y_axis=y_axis,
            )
        )

    content_extent = MERCATOR_EXTENT if extent is None else extent
    logger.debug(
        'Built %s schema: zoom %d..%d, extent %s',
        name,
        min_zoom,
        max_zoom,
        content_extent.as_tuple(),
    )
    return TileSchema(
        matrices,
        content_extent,
        name=name,
        srs=MERCATOR_SRS,
        format=format,
    )

