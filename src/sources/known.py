"""Catalog of well-known public tile services."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

from shared.constants import DEFAULT_USER_AGENT, MAX_ZOOM, MIN_ZOOM
from tiles.extent import Extent
from tiles.fetcher import TileFetcher
from tiles.schema import global_spherical_mercator
from tiles.source import Attribution, CachingTileSource

if TYPE_CHECKING:
    import aiohttp

    from tiles.cache import PersistentCache
    from tiles.fetcher import FetchOverride


class KnownTileSource(str, Enum):
    OPEN_STREET_MAP = 'OpenStreetMap'
    OPEN_CYCLE_MAP = 'OpenCycleMap'
    OPEN_CYCLE_MAP_TRANSPORT = 'OpenCycleMapTransport'
    BING_AERIAL = 'BingAerial'
    BING_HYBRID = 'BingHybrid'
    BING_ROADS = 'BingRoads'
    BING_AERIAL_STAGING = 'BingAerialStaging'
    BING_HYBRID_STAGING = 'BingHybridStaging'
    BING_ROADS_STAGING = 'BingRoadsStaging'
    STAMEN_TONER = 'StamenToner'
    STAMEN_TONER_LITE = 'StamenTonerLite'
    STAMEN_WATERCOLOR = 'StamenWatercolor'
    STAMEN_TERRAIN = 'StamenTerrain'
    ESRI_WORLD_TOPO = 'EsriWorldTopo'
    ESRI_WORLD_PHYSICAL = 'EsriWorldPhysical'
    ESRI_WORLD_SHADED_RELIEF = 'EsriWorldShadedRelief'
    ESRI_WORLD_REFERENCE_OVERLAY = 'EsriWorldReferenceOverlay'
    ESRI_WORLD_TRANSPORTATION = 'EsriWorldTransportation'
    ESRI_WORLD_BOUNDARIES_AND_PLACES = 'EsriWorldBoundariesAndPlaces'
    ESRI_WORLD_DARK_GRAY_BASE = 'EsriWorldDarkGrayBase'
    BKG_TOP_PLUS_COLOR = 'BKGTopPlusColor'
    BKG_TOP_PLUS_GREY = 'BKGTopPlusGrey'


@dataclass(frozen=True)
class KnownSourceInfo:
    """Static description of one catalog entry."""

    url_template: str
    min_zoom: int
    max_zoom: int
    subdomains: tuple[str, ...] = ()
    attribution: Attribution = Attribution()
    extent: Extent | None = None
    format: str = 'png'


OSM_ATTRIBUTION = Attribution(
    '© OpenStreetMap contributors', 'https://www.openstreetmap.org/copyright'
)
MICROSOFT_ATTRIBUTION = Attribution('© Microsoft')
BKG_ATTRIBUTION = Attribution(
    f'© Bundesamt für Kartographie und Geodäsie ({dt.date.today().year})',
    'https://sg.geodatenzentrum.de/web_public/Datenquellen_TopPlus_Open.pdf',
)

ABC = ('a', 'b', 'c')
ABCD = ('a', 'b', 'c', 'd')
BING_SUBDOMAINS = tuple(str(i) for i in range(8))

_BING = 'https://t{s}.tiles.virtualearth.net/tiles/%s{quadkey}.jpeg?g=517&token={k}'
_BING_STAGING = (
    'http://t{s}.staging.tiles.virtualearth.net/tiles/%s{quadkey}.jpeg?g=517&token={k}'
)
_STAMEN = 'http://{s}.tile.stamen.com/%s/{z}/{x}/{y}.png'
_ESRI = 'https://server.arcgisonline.com/ArcGIS/rest/services/%s/MapServer/tile/{z}/{y}/{x}'
_BKG = (
    'https://sg.geodatenzentrum.de/wmts_topplus_open/tile/1.0.0/'
    '%s/default/WEBMERCATOR/{z}/{y}/{x}.png'
)

# Stamen terrain only covers the continental United States
STAMEN_TERRAIN_EXTENT = Extent(
    -14871588.04, 2196494.41775, -5831227.94199995, 10033429.95725
)


def _bing(layer: str, template: str = _BING, *, staging: bool = False) -> KnownSourceInfo:
    return KnownSourceInfo(
        template % layer,
        1,
        19,
        BING_SUBDOMAINS,
        Attribution() if staging else MICROSOFT_ATTRIBUTION,
        format='jpg',
    )


def _stamen(layer: str, min_zoom: int = 0, extent: Extent | None = None) -> KnownSourceInfo:
    return KnownSourceInfo(_STAMEN % layer, min_zoom, 19, ABCD, OSM_ATTRIBUTION, extent)


def _esri(service: str, max_zoom: int) -> KnownSourceInfo:
    return KnownSourceInfo(_ESRI % service, 0, max_zoom)


KNOWN_SOURCES = MappingProxyType({
    KnownTileSource.OPEN_STREET_MAP: KnownSourceInfo(
        'https://tile.openstreetmap.org/{z}/{x}/{y}.png', 0, 18,
        attribution=OSM_ATTRIBUTION,
    ),
    KnownTileSource.OPEN_CYCLE_MAP: KnownSourceInfo(
        'http://{s}.tile.opencyclemap.org/cycle/{z}/{x}/{y}.png', 0, 17, ABC,
        OSM_ATTRIBUTION,
    ),
    KnownTileSource.OPEN_CYCLE_MAP_TRANSPORT: KnownSourceInfo(
        'http://{s}.tile2.opencyclemap.org/transport/{z}/{x}/{y}.png', 0, 20, ABC,
        OSM_ATTRIBUTION,
    ),
    KnownTileSource.BING_AERIAL: _bing('a'),
    KnownTileSource.BING_HYBRID: _bing('h'),
    KnownTileSource.BING_ROADS: _bing('r'),
    KnownTileSource.BING_AERIAL_STAGING: _bing('a', _BING_STAGING, staging=True),
    KnownTileSource.BING_HYBRID_STAGING: _bing('h', _BING_STAGING, staging=True),
    KnownTileSource.BING_ROADS_STAGING: _bing('r', _BING_STAGING, staging=True),
    KnownTileSource.STAMEN_TONER: _stamen('toner'),
    KnownTileSource.STAMEN_TONER_LITE: _stamen('toner-lite'),
    KnownTileSource.STAMEN_WATERCOLOR: _stamen('watercolor'),
    KnownTileSource.STAMEN_TERRAIN: _stamen('terrain', 4, STAMEN_TERRAIN_EXTENT),
    KnownTileSource.ESRI_WORLD_TOPO: _esri('World_Topo_Map', 19),
    KnownTileSource.ESRI_WORLD_PHYSICAL: _esri('World_Physical_Map', 8),
    KnownTileSource.ESRI_WORLD_SHADED_RELIEF: _esri('World_Shaded_Relief', 13),
    KnownTileSource.ESRI_WORLD_REFERENCE_OVERLAY: _esri(
        'Reference/World_Reference_Overlay', 13
    ),
    KnownTileSource.ESRI_WORLD_TRANSPORTATION: _esri(
        'Reference/World_Transportation', 19
    ),
    KnownTileSource.ESRI_WORLD_BOUNDARIES_AND_PLACES: _esri(
        'Reference/World_Boundaries_and_Places', 19
    ),
    KnownTileSource.ESRI_WORLD_DARK_GRAY_BASE: KnownSourceInfo(
        'https://server.arcgisonline.com/arcgis/rest/services/Canvas/'
        'World_Dark_Gray_Base/MapServer/tile/{z}/{y}/{x}',
        0,
        16,
    ),
    KnownTileSource.BKG_TOP_PLUS_COLOR: KnownSourceInfo(
        _BKG % 'web_scale', 0, 19, attribution=BKG_ATTRIBUTION
    ),
    KnownTileSource.BKG_TOP_PLUS_GREY: KnownSourceInfo(
        _BKG % 'web_scale_grau', 0, 19, attribution=BKG_ATTRIBUTION
    ),
})


def create_tile_source(
    source: KnownTileSource | str = KnownTileSource.OPEN_STREET_MAP,
    api_key: str | None = None,
    persistent_cache: PersistentCache | None = None,
    fetch_override: FetchOverride | None = None,
    user_agent: str | None = None,
    min_zoom: int = MIN_ZOOM,
    max_zoom: int = MAX_ZOOM,
    *,
    session: aiohttp.ClientSession | None = None,
) -> CachingTileSource:
    """Tile source for a catalog entry.

    The requested zoom range is clamped to what the service provides.
    Raises SchemaConfigurationError when the clamped range is empty.
    """
    source = KnownTileSource(source)
    info = KNOWN_SOURCES[source]
    schema = global_spherical_mercator(
        max(info.min_zoom, min_zoom),
        min(info.max_zoom, max_zoom),
        extent=info.extent,
        format=info.format,
        name=source.value,
    )
    fetcher = TileFetcher(
        info.url_template,
        subdomains=info.subdomains,
        api_key=api_key,
        user_agent=user_agent or DEFAULT_USER_AGENT,
        session=session,
        fetch_override=fetch_override,
    )
    return CachingTileSource(
        schema,
        fetcher,
        persistent_cache,
        name=source.value,
        attribution=info.attribution,
    )
