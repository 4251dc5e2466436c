"""Conversions between WGS84 lon/lat and Web Mercator."""

from __future__ import annotations

from functools import lru_cache

from pyproj import Transformer

from shared.constants import (
    MERCATOR_MAX_LAT_DEG,
    MERCATOR_SRS,
    WGS84_SRS,
    WORLD_LNG_HALF_SPAN_DEG,
)
from tiles.extent import Extent


@lru_cache(maxsize=1)
def _to_mercator() -> Transformer:
    return Transformer.from_crs(WGS84_SRS, MERCATOR_SRS, always_xy=True)


@lru_cache(maxsize=1)
def _to_lonlat() -> Transformer:
    return Transformer.from_crs(MERCATOR_SRS, WGS84_SRS, always_xy=True)


def clamp_lat(lat: float) -> float:
    return max(min(lat, MERCATOR_MAX_LAT_DEG), -MERCATOR_MAX_LAT_DEG)


def lonlat_to_mercator(lon: float, lat: float) -> tuple[float, float]:
    """Project a WGS84 point; latitude is clamped to the Mercator limit."""
    lon = max(min(lon, WORLD_LNG_HALF_SPAN_DEG), -WORLD_LNG_HALF_SPAN_DEG)
    x, y = _to_mercator().transform(lon, clamp_lat(lat))
    return float(x), float(y)


def mercator_to_lonlat(x: float, y: float) -> tuple[float, float]:
    lon, lat = _to_lonlat().transform(x, y)
    return float(lon), float(lat)


def lonlat_extent_to_mercator(
    min_lon: float,
    min_lat: float,
    max_lon: float,
    max_lat: float,
) -> Extent:
    """Web Mercator extent of a lon/lat bounding box."""
    min_x, min_y = lonlat_to_mercator(min_lon, min_lat)
    max_x, max_y = lonlat_to_mercator(max_lon, max_lat)
    return Extent(min_x, min_y, max_x, max_y)


def mercator_extent_to_lonlat(extent: Extent) -> tuple[float, float, float, float]:
    """(min_lon, min_lat, max_lon, max_lat) of a Web Mercator extent."""
    min_lon, min_lat = mercator_to_lonlat(extent.min_x, extent.min_y)
    max_lon, max_lat = mercator_to_lonlat(extent.max_x, extent.max_y)
    return min_lon, min_lat, max_lon, max_lat
