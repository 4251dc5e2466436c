"""Shared constants, errors and helpers."""
from shared.errors import (
    CacheReadCorruptError,
    CacheWriteError,
    FetchFailedError,
    InvalidIndexError,
    SchemaConfigurationError,
    TileError,
    TileNotFoundError,
)
from shared.log import mask_secret, setup_logging
from shared.paths import resolve_cache_dir, resolve_profiles_dir

__all__ = [
    'CacheReadCorruptError',
    'CacheWriteError',
    'FetchFailedError',
    'InvalidIndexError',
    'SchemaConfigurationError',
    'TileError',
    'TileNotFoundError',
    'mask_secret',
    'resolve_cache_dir',
    'resolve_profiles_dir',
    'setup_logging',
]
