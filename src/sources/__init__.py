"""Ready-made tile sources: the known-service catalog and config factory."""
from sources.factory import build_cache, build_schema, build_tile_source
from sources.known import (
    KNOWN_SOURCES,
    KnownSourceInfo,
    KnownTileSource,
    create_tile_source,
)

__all__ = [
    'KNOWN_SOURCES',
    'KnownSourceInfo',
    'KnownTileSource',
    'build_cache',
    'build_schema',
    'build_tile_source',
    'create_tile_source',
]
