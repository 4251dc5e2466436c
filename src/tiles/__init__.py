"""Tile addressing and caching engine.

This module provides:
- TileIndex, TileInfo, Extent: tile addresses and rectangles
- TileMatrix, TileSchema: per-level grid math and level selection
- FileTileCache, SQLiteTileCache: persistent caches with expiration
- TileFetcher: HTTP (or injected) retrieval from URL templates
- CachingTileSource: cache-then-fetch orchestration
- FileTileProvider: tiles served from a local directory
"""

from tiles.cache import FileTileCache, PersistentCache
from tiles.extent import Extent
from tiles.fetcher import TileFetcher, TileProvider
from tiles.file_provider import FileTileProvider, file_tile_source
from tiles.index import TileIndex, TileInfo
from tiles.matrix import TileMatrix, TileRange
from tiles.request import TileUrlTemplate
from tiles.schema import TileSchema, global_spherical_mercator
from tiles.source import Attribution, CachingTileSource
from tiles.sqlite_cache import SQLiteTileCache

__all__ = [
    'Attribution',
    'CachingTileSource',
    'Extent',
    'FileTileCache',
    'FileTileProvider',
    'PersistentCache',
    'SQLiteTileCache',
    'TileFetcher',
    'TileIndex',
    'TileInfo',
    'TileMatrix',
    'TileProvider',
    'TileRange',
    'TileSchema',
    'TileUrlTemplate',
    'file_tile_source',
    'global_spherical_mercator',
]
