"""Tests for TileSchema."""

import random

import pytest

from shared.constants import MERCATOR_HALF_EXTENT_M as H
from shared.errors import InvalidIndexError, SchemaConfigurationError
from tiles.extent import Extent
from tiles.index import TileIndex
from tiles.matrix import TileMatrix
from tiles.schema import (
    MERCATOR_EXTENT,
    TileSchema,
    global_spherical_mercator,
    mercator_resolution,
)


@pytest.fixture
def schema():
    return global_spherical_mercator(0, 5)


class TestSchemaConstruction:
    """Schema building validates its levels."""

    def test_empty_schema_rejected(self):
        with pytest.raises(SchemaConfigurationError):
            TileSchema([], MERCATOR_EXTENT)

    def test_duplicate_level_rejected(self):
        m = TileMatrix(0, 10.0, 0, 0, 1, 1)
        with pytest.raises(SchemaConfigurationError):
            TileSchema([m, TileMatrix(0, 5.0, 0, 0, 1, 1)], MERCATOR_EXTENT)

    def test_levels_must_get_finer(self):
        coarse = TileMatrix('a', 10.0, 0, 0, 1, 1)
        also_coarse = TileMatrix('b', 10.0, 0, 0, 1, 1)
        with pytest.raises(SchemaConfigurationError):
            TileSchema([coarse, also_coarse], MERCATOR_EXTENT)

    def test_invalid_zoom_range(self):
        with pytest.raises(SchemaConfigurationError):
            global_spherical_mercator(5, 2)

    def test_global_mercator_levels(self, schema):
        assert schema.levels == [0, 1, 2, 3, 4, 5]
        assert schema.srs == 'EPSG:3857'
        assert schema.matrix(3).matrix_width == 8
        assert schema.matrix(0).resolution == pytest.approx(156543.0339, abs=1e-4)


class TestLevelZeroScenario:
    """One 256 px tile covering the whole world at level 0."""

    def test_full_extent_returns_single_tile(self):
        half = 20037508.34
        matrix = TileMatrix(
            identifier=0,
            resolution=156543.03,
            origin_x=-half,
            origin_y=half,
            matrix_width=1,
            matrix_height=1,
        )
        extent = Extent(-half, -half, half, half)
        schema = TileSchema([matrix], extent)

        assert schema.get_tile_indices(extent, 0) == [TileIndex(0, 0, 0)]

    def test_predefined_schema(self, schema):
        extent = Extent(-20037508.34, -20037508.34, 20037508.34, 20037508.34)
        assert schema.get_tile_indices(extent, 0) == [TileIndex(0, 0, 0)]


class TestTileCoverage:
    """get_tile_infos returns exactly the intersecting tiles."""

    def test_random_extents_match_brute_force(self, schema):
        rng = random.Random(42)
        for _ in range(50):
            x0, x1 = sorted(rng.uniform(-H, H) for _ in range(2))
            y0, y1 = sorted(rng.uniform(-H, H) for _ in range(2))
            query = Extent(x0, y0, x1, y1)
            for level in range(4):
                matrix = schema.matrix(level)
                expected = {
                    TileIndex(level, col, row)
                    for col in range(matrix.matrix_width)
                    for row in range(matrix.matrix_height)
                    if matrix.tile_to_extent(col, row).intersects(query)
                }
                infos = schema.get_tile_infos(query, level)
                assert {info.index for info in infos} == expected
                for info in infos:
                    assert info.extent.intersects(query)

    def test_extent_outside_schema_is_empty(self, schema):
        assert schema.get_tile_infos(Extent(2 * H, 2 * H, 3 * H, 3 * H), 2) == []

    def test_zero_area_extent(self, schema):
        assert schema.get_tile_indices(Extent(1, 1, 1, 1), 1) == [TileIndex(1, 1, 0)]

    def test_content_extent_limits_tiles(self):
        narrow = global_spherical_mercator(0, 3, extent=Extent(1, 1, H / 4 - 1, H / 4 - 1))
        world = Extent(-H, -H, H, H)
        assert narrow.get_tile_indices(world, 3) == [TileIndex(3, 4, 3)]

    def test_unknown_level(self, schema):
        with pytest.raises(InvalidIndexError):
            schema.get_tile_infos(MERCATOR_EXTENT, 42)


class TestValidateIndex:
    """Tests for validate_index and tile_to_extent."""

    def test_valid(self, schema):
        assert schema.validate_index(TileIndex(2, 3, 3)) is schema.matrix(2)

    @pytest.mark.parametrize(
        'index',
        [TileIndex(6, 0, 0), TileIndex(2, 4, 0), TileIndex(2, 0, -1), TileIndex('2', 0, 0)],
    )
    def test_invalid(self, schema, index):
        with pytest.raises(InvalidIndexError):
            schema.validate_index(index)

    def test_tile_info(self, schema):
        info = schema.tile_info(TileIndex(1, 0, 0))
        assert info.extent == Extent(-H, 0, 0, H)


class TestLevelForResolution:
    """Level selection picks the closest level that is not coarser."""

    def test_exact_match(self, schema):
        assert schema.level_for_resolution(mercator_resolution(2)) == 2

    def test_between_levels_picks_finer(self, schema):
        assert schema.level_for_resolution(mercator_resolution(2) * 1.5) == 2

    def test_finer_than_finest(self, schema):
        assert schema.level_for_resolution(0.001) == 5

    def test_coarser_than_coarsest(self, schema):
        assert schema.level_for_resolution(1e9) == 0

    def test_non_positive(self, schema):
        with pytest.raises(ValueError):
            schema.level_for_resolution(0)
