"""Build schemas, caches and tile sources from validated configs."""

from __future__ import annotations

import functools
import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from shared.constants import API_KEY_VISIBLE_PREFIX_LEN
from shared.log import mask_secret
from shared.paths import resolve_cache_dir
from tiles.cache import FileTileCache
from tiles.extent import Extent
from tiles.fetcher import TileFetcher
from tiles.matrix import TileMatrix
from tiles.schema import TileSchema, global_spherical_mercator
from tiles.source import Attribution, CachingTileSource
from tiles.sqlite_cache import SQLiteTileCache

if TYPE_CHECKING:
    import aiohttp

    from domain.models import CacheConfig, SchemaConfig, SourceConfig
    from tiles.cache import PersistentCache
    from tiles.fetcher import FetchOverride

logger = logging.getLogger(__name__)


def build_schema(config: SchemaConfig) -> TileSchema:
    """TileSchema for a descriptor.

    Explicit matrices build a custom schema whose extent defaults to the
    union of the matrix extents; otherwise the global mercator grid is used.
    """
    extent = Extent(*config.extent) if config.extent is not None else None
    if not config.matrices:
        return global_spherical_mercator(
            config.min_zoom,
            config.max_zoom,
            extent=extent,
            y_axis=config.y_axis,
            format=config.format,
            name=config.name,
        )

    matrices = [
        TileMatrix(
            identifier=m.identifier,
            resolution=m.resolution,
            origin_x=m.origin_x,
            origin_y=m.origin_y,
            matrix_width=m.matrix_width,
            matrix_height=m.matrix_height,
            tile_width=m.tile_width,
            tile_height=m.tile_height,
            y_axis=config.y_axis,
        )
        for m in config.matrices
    ]
    if extent is None:
        extent = functools.reduce(Extent.union, (m.extent for m in matrices))
    return TileSchema(
        matrices,
        extent,
        name=config.name,
        srs=config.srs,
        format=config.format,
    )


def build_cache(
    config: CacheConfig, format: str  # noqa: A002
) -> PersistentCache | None:
    if config.backend == 'none':
        return None
    directory = resolve_cache_dir(config.directory)
    expire_after = timedelta(hours=config.expire_hours)
    if config.backend == 'sqlite':
        return SQLiteTileCache(directory, expire_after)
    return FileTileCache(directory, format, expire_after)


def build_tile_source(
    config: SourceConfig,
    *,
    session: aiohttp.ClientSession | None = None,
    fetch_override: FetchOverride | None = None,
) -> CachingTileSource:
    """Remote tile source: fetcher, cache and schema from one SourceConfig."""
    schema = build_schema(config.tiling)
    cache = build_cache(config.cache, schema.format)
    fetcher = TileFetcher(
        config.url_template,
        subdomains=config.subdomains,
        api_key=config.api_key,
        headers=config.headers,
        user_agent=config.user_agent,
        session=session,
        timeout_s=config.timeout_s,
        fetch_override=fetch_override,
    )
    logger.info(
        'Tile source %s: %s levels=%d cache=%s api_key=%s',
        config.name,
        fetcher.template.redact(config.url_template),
        len(schema.levels),
        config.cache.backend,
        mask_secret(config.api_key, API_KEY_VISIBLE_PREFIX_LEN) or '-',
    )
    return CachingTileSource(
        schema,
        fetcher,
        cache,
        name=config.name,
        attribution=Attribution(config.attribution.text, config.attribution.url),
    )
