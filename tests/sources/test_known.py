"""Tests for the known tile source catalog."""

import pytest

from shared.errors import SchemaConfigurationError
from sources.known import (
    KNOWN_SOURCES,
    STAMEN_TERRAIN_EXTENT,
    KnownTileSource,
    create_tile_source,
)
from tiles.index import TileIndex


class RecordingFetch:
    def __init__(self):
        self.urls = []

    async def __call__(self, url):
        self.urls.append(url)
        return b'tile'


class TestCatalog:
    """Every known source is described."""

    def test_every_source_has_an_entry(self):
        assert set(KNOWN_SOURCES) == set(KnownTileSource)

    @pytest.mark.parametrize('source', list(KnownTileSource))
    def test_every_source_builds(self, source):
        tile_source = create_tile_source(source, api_key='key')
        assert tile_source.name == source.value
        info = KNOWN_SOURCES[source]
        assert tile_source.schema.levels[0] == info.min_zoom
        assert tile_source.schema.levels[-1] == info.max_zoom


class TestCreateTileSource:
    """Tests for create_tile_source."""

    def test_default_is_openstreetmap(self):
        source = create_tile_source()
        assert source.name == 'OpenStreetMap'
        assert source.schema.levels == list(range(19))
        assert 'OpenStreetMap' in source.attribution.text

    def test_zoom_range_clamped(self):
        source = create_tile_source(KnownTileSource.BING_ROADS, min_zoom=0, max_zoom=5)
        assert source.schema.levels == [1, 2, 3, 4, 5]

    def test_empty_zoom_range(self):
        with pytest.raises(SchemaConfigurationError):
            create_tile_source(KnownTileSource.ESRI_WORLD_PHYSICAL, min_zoom=10)

    def test_lookup_by_name(self):
        assert create_tile_source('EsriWorldTopo').name == 'EsriWorldTopo'

    def test_stamen_terrain_extent(self):
        source = create_tile_source(KnownTileSource.STAMEN_TERRAIN)
        assert source.schema.extent == STAMEN_TERRAIN_EXTENT
        assert source.schema.levels[0] == 4

    @pytest.mark.asyncio
    async def test_osm_url(self):
        fetch = RecordingFetch()
        source = create_tile_source(fetch_override=fetch)
        await source.get_tile(TileIndex(1, 0, 1))
        assert fetch.urls == ['https://tile.openstreetmap.org/1/0/1.png']

    @pytest.mark.asyncio
    async def test_bing_url(self):
        fetch = RecordingFetch()
        source = create_tile_source(
            KnownTileSource.BING_AERIAL, api_key='abc', fetch_override=fetch
        )
        await source.get_tile(TileIndex(3, 3, 5))
        assert fetch.urls == [
            'https://t0.tiles.virtualearth.net/tiles/a213.jpeg?g=517&token=abc'
        ]
        assert source.schema.format == 'jpg'

    @pytest.mark.asyncio
    async def test_esri_url_is_row_then_col(self):
        fetch = RecordingFetch()
        source = create_tile_source(KnownTileSource.ESRI_WORLD_TOPO, fetch_override=fetch)
        await source.get_tile(TileIndex(2, 1, 3))
        assert fetch.urls[0].endswith('/MapServer/tile/2/3/1')

    @pytest.mark.asyncio
    async def test_user_agent(self):
        source = create_tile_source(user_agent='my-app/2.0')
        assert source.provider.headers['User-Agent'] == 'my-app/2.0'

    @pytest.mark.asyncio
    async def test_esri_dark_gray_lowercase_path(self):
        fetch = RecordingFetch()
        source = create_tile_source(
            KnownTileSource.ESRI_WORLD_DARK_GRAY_BASE, fetch_override=fetch
        )
        await source.get_tile(TileIndex(2, 1, 3))
        assert fetch.urls == [
            'https://server.arcgisonline.com/arcgis/rest/services/Canvas/'
            'World_Dark_Gray_Base/MapServer/tile/2/3/1'
        ]
