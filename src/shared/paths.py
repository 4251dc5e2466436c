"""Default locations for tile caches and source profiles."""

import os
from pathlib import Path

from shared.constants import TILE_CACHE_DIR


def resolve_cache_dir(raw: str | Path | None = None) -> Path:
    """Resolve the tile cache root.

    Absolute paths are used as is. Relative paths are placed under the user
    cache root: LOCALAPPDATA on Windows, XDG_CACHE_HOME or ~/.cache elsewhere.
    """
    raw_dir = Path(raw or TILE_CACHE_DIR)
    if raw_dir.is_absolute():
        return raw_dir

    local = os.getenv('LOCALAPPDATA')
    if local:
        return (Path(local) / 'tiledepot' / raw_dir).resolve()
    xdg = os.getenv('XDG_CACHE_HOME')
    base = Path(xdg) if xdg else Path.home() / '.cache'
    return (base / 'tiledepot' / raw_dir).resolve()


def resolve_profiles_dir() -> Path:
    """Directory holding TOML source profiles (APPDATA or XDG config)."""
    appdata = os.getenv('APPDATA')
    if appdata:
        return Path(appdata) / 'tiledepot' / 'profiles'
    xdg = os.getenv('XDG_CONFIG_HOME')
    base = Path(xdg) if xdg else Path.home() / '.config'
    return base / 'tiledepot' / 'profiles'
