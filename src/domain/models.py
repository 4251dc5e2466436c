from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from shared.constants import (
    DEFAULT_TILE_FORMAT,
    DEFAULT_USER_AGENT,
    HTTP_TIMEOUT_DEFAULT,
    MAX_ZOOM,
    MERCATOR_SRS,
    MIN_ZOOM,
    TILE_CACHE_DIR,
    TILE_SIZE,
    URL_TOKEN_SUBDOMAIN,
    YAxis,
)


class AttributionConfig(BaseModel):
    text: str = ''
    url: str = ''


class MatrixConfig(BaseModel):
    """One zoom level of a static schema descriptor."""

    identifier: int | str
    resolution: float
    origin_x: float
    origin_y: float
    matrix_width: int = Field(ge=1)
    matrix_height: int = Field(ge=1)
    tile_width: int = Field(default=TILE_SIZE, ge=1)
    tile_height: int = Field(default=TILE_SIZE, ge=1)

    @field_validator('resolution')
    @classmethod
    def validate_resolution(cls, v: float) -> float:
        if not v > 0:
            msg = 'resolution must be > 0'
            raise ValueError(msg)
        return v


class SchemaConfig(BaseModel):
    """Tiling scheme descriptor.

    Without explicit matrices the global spherical mercator grid for
    [min_zoom, max_zoom] is used.
    """

    name: str = 'GlobalSphericalMercator'
    srs: str = MERCATOR_SRS
    format: str = DEFAULT_TILE_FORMAT
    y_axis: YAxis = YAxis.TOP_LEFT
    # (min_x, min_y, max_x, max_y); None means the full grid
    extent: tuple[float, float, float, float] | None = None
    min_zoom: int = Field(default=MIN_ZOOM, ge=0)
    max_zoom: int = MAX_ZOOM
    matrices: list[MatrixConfig] = Field(default_factory=list)

    @field_validator('extent')
    @classmethod
    def validate_extent(
        cls, v: tuple[float, float, float, float] | None
    ) -> tuple[float, float, float, float] | None:
        if v is not None and (v[0] > v[2] or v[1] > v[3]):
            msg = 'extent must be (min_x, min_y, max_x, max_y)'
            raise ValueError(msg)
        return v

    @model_validator(mode='after')
    def validate_zoom_range(self) -> SchemaConfig:
        if self.max_zoom < self.min_zoom:
            msg = 'max_zoom must be >= min_zoom'
            raise ValueError(msg)
        return self


class CacheConfig(BaseModel):
    backend: Literal['file', 'sqlite', 'none'] = 'file'
    # Relative paths resolve against the user cache root
    directory: str = TILE_CACHE_DIR
    # Expiration horizon; 0 means tiles never expire
    expire_hours: float = Field(default=0.0, ge=0)


class SourceConfig(BaseModel):
    """Everything needed to build a remote tile source."""

    model_config = {
        'extra': 'ignore',
    }

    name: str = Field(min_length=1)
    url_template: str = Field(min_length=1)
    subdomains: list[str] = Field(default_factory=list)
    api_key: str | None = None
    user_agent: str | None = DEFAULT_USER_AGENT
    timeout_s: float = Field(default=HTTP_TIMEOUT_DEFAULT, gt=0)
    # Tables after scalars keeps the TOML dump flat
    headers: dict[str, str] = Field(default_factory=dict)
    attribution: AttributionConfig = Field(default_factory=AttributionConfig)
    tiling: SchemaConfig = Field(default_factory=SchemaConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    @model_validator(mode='after')
    def validate_subdomains(self) -> SourceConfig:
        if URL_TOKEN_SUBDOMAIN in self.url_template and not self.subdomains:
            msg = 'url_template uses {s} but subdomains is empty'
            raise ValueError(msg)
        return self
