"""Domain layer - source descriptors and profiles."""
from domain.models import (
    AttributionConfig,
    CacheConfig,
    MatrixConfig,
    SchemaConfig,
    SourceConfig,
)
from domain.profiles import (
    delete_profile,
    ensure_profiles_dir,
    list_profiles,
    load_profile,
    save_profile,
)

__all__ = [
    'AttributionConfig',
    'CacheConfig',
    'MatrixConfig',
    'SchemaConfig',
    'SourceConfig',
    'delete_profile',
    'ensure_profiles_dir',
    'list_profiles',
    'load_profile',
    'save_profile',
]
