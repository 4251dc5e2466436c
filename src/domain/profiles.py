"""TOML source profiles.

A profile describes one remote tile source: URL template, headers,
tiling scheme and cache settings. Example::

    name = "osm"
    url_template = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"

    [tiling]
    max_zoom = 19

    [cache]
    directory = "osm"
    expire_hours = 168
"""

from __future__ import annotations

import logging
from pathlib import Path

import tomlkit
from pydantic import ValidationError
from tomlkit.exceptions import ParseError

from domain.models import SourceConfig
from shared.errors import SchemaConfigurationError
from shared.paths import resolve_profiles_dir

logger = logging.getLogger(__name__)

PROFILE_SUFFIX = '.toml'


def ensure_profiles_dir(folder: Path | None = None) -> Path:
    profiles_dir = folder or resolve_profiles_dir()
    profiles_dir.mkdir(parents=True, exist_ok=True)
    return profiles_dir


def list_profiles(folder: Path | None = None) -> list[str]:
    """Profile names without extension."""
    folder = ensure_profiles_dir(folder)
    return sorted(p.stem for p in folder.glob(f'*{PROFILE_SUFFIX}') if p.is_file())


def profile_path(name: str, folder: Path | None = None) -> Path:
    return ensure_profiles_dir(folder) / f'{name}{PROFILE_SUFFIX}'


def load_profile(name_or_path: str | Path, folder: Path | None = None) -> SourceConfig:
    """Load and validate a TOML profile.

    Accepts a profile name from the profiles directory or a path to a TOML
    file.
    """
    p = Path(name_or_path)
    path = (
        p
        if p.suffix.lower() == PROFILE_SUFFIX and p.exists()
        else profile_path(str(name_or_path), folder)
    )
    if not path.exists():
        msg = f'Profile not found: {path}'
        raise FileNotFoundError(msg)

    text = path.read_text(encoding='utf-8')
    try:
        data = tomlkit.parse(text).unwrap()
        config = SourceConfig.model_validate(data)
    except (ParseError, ValidationError) as exc:
        msg = f'Invalid tile source profile {path}: {exc}'
        raise SchemaConfigurationError(msg) from exc

    logger.info('Loaded tile source profile %s from %s', config.name, path)
    return config


def save_profile(
    name: str,
    config: SourceConfig,
    folder: Path | None = None,
    *,
    include_secrets: bool = False,
) -> Path:
    """Write a profile as TOML. The API key is left out unless asked for."""
    path = profile_path(name, folder)
    exclude = None if include_secrets else {'api_key'}
    data = config.model_dump(mode='json', exclude_none=True, exclude=exclude)
    path.write_text(tomlkit.dumps(data), encoding='utf-8')
    return path


def delete_profile(name: str, folder: Path | None = None) -> None:
    """Remove a profile file if it exists."""
    path = profile_path(name, folder)
    if path.exists():
        path.unlink()
