"""CRS identifiers as found in WMTS capability documents."""

from __future__ import annotations

from dataclasses import dataclass

from pyproj import CRS
from pyproj.exceptions import CRSError

from shared.errors import SchemaConfigurationError

# 'EPSG:3857'
_SHORT_PARTS = 2
# 'urn:ogc:def:crs:EPSG::3857'
_URN_PARTS = 6
# 'urn:ogc:def:crs:EPSG:6.18:3857'
_URN_VERSIONED_PARTS = 7


@dataclass(frozen=True)
class CrsIdentifier:
    """Authority, optional version and code of a coordinate system."""

    authority: str
    identifier: str
    version: str = ''

    def __str__(self) -> str:
        return f'urn:ogc:def:crs:{self.authority}:{self.version}:{self.identifier}'

    @property
    def srs(self) -> str:
        """Short 'AUTHORITY:CODE' form."""
        return f'{self.authority}:{self.identifier}'

    @classmethod
    def try_parse(cls, text: str) -> CrsIdentifier | None:
        parts = text.strip().split(':')
        if len(parts) == _SHORT_PARTS:
            authority, version, identifier = parts[0], '', parts[1]
        elif len(parts) == _URN_PARTS:
            authority, version, identifier = parts[4], '', parts[5]
        elif len(parts) == _URN_VERSIONED_PARTS:
            authority, version, identifier = parts[4], parts[5], parts[6]
        else:
            return None
        if not authority:
            return None
        return cls(authority=authority, identifier=identifier, version=version)

    @classmethod
    def parse(cls, text: str) -> CrsIdentifier:
        crs = cls.try_parse(text)
        if crs is None:
            msg = f'Unrecognized CRS identifier: {text!r}'
            raise SchemaConfigurationError(msg)
        return crs

    def to_crs(self) -> CRS:
        """Resolve the identifier with pyproj."""
        try:
            return CRS.from_authority(self.authority, self.identifier)
        except CRSError as exc:
            msg = f'Unknown CRS {self.srs}: {exc}'
            raise SchemaConfigurationError(msg) from exc
