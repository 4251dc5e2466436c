"""Tile URL templates: token validation and substitution."""

from __future__ import annotations

import itertools
import logging
import re
from typing import TYPE_CHECKING

from shared.constants import (
    API_KEY_VISIBLE_PREFIX_LEN,
    URL_TOKEN_COL,
    URL_TOKEN_KEY,
    URL_TOKEN_LEVEL,
    URL_TOKEN_QUADKEY,
    URL_TOKEN_ROW,
    URL_TOKEN_SUBDOMAIN,
)
from shared.errors import SchemaConfigurationError
from shared.log import mask_secret

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tiles.index import TileIndex

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r'\{([^{}]*)\}')

KNOWN_TOKENS = frozenset(
    token.strip('{}')
    for token in (
        URL_TOKEN_LEVEL,
        URL_TOKEN_COL,
        URL_TOKEN_ROW,
        URL_TOKEN_SUBDOMAIN,
        URL_TOKEN_KEY,
        URL_TOKEN_QUADKEY,
    )
)


class TileUrlTemplate:
    """URL pattern with {z} {x} {y} {s} {k} {quadkey} tokens.

    Substitution is plain text replacement; nothing is escaped. Subdomains
    for {s} are handed out round-robin, one per resolved URL.
    """

    def __init__(
        self,
        template: str,
        subdomains: Sequence[str] = (),
        api_key: str | None = None,
    ) -> None:
        if not template:
            msg = 'Tile URL template is empty'
            raise SchemaConfigurationError(msg)

        tokens = set(_TOKEN_RE.findall(template))
        unknown = tokens - KNOWN_TOKENS
        if unknown:
            msg = f'Unknown tokens {sorted(unknown)} in URL template {template!r}'
            raise SchemaConfigurationError(msg)
        has_xy = {'x', 'y'} <= tokens
        if not has_xy and 'quadkey' not in tokens:
            msg = f'URL template {template!r} needs {{x}} and {{y}}, or {{quadkey}}'
            raise SchemaConfigurationError(msg)
        if 's' in tokens and not subdomains:
            msg = f'URL template {template!r} uses {{s}} but no subdomains are given'
            raise SchemaConfigurationError(msg)
        if 'k' in tokens and not api_key:
            logger.warning('URL template %s expects an API key; none configured', template)

        self.template = template
        self.subdomains = tuple(subdomains)
        self.api_key = api_key
        self._tokens = frozenset(tokens)
        self._counter = itertools.count()

    def __repr__(self) -> str:
        return f'TileUrlTemplate({self.redact(self.template)!r})'

    def next_subdomain(self) -> str:
        return self.subdomains[next(self._counter) % len(self.subdomains)]

    def resolve(self, index: TileIndex) -> str:
        url = self.template
        if 'quadkey' in self._tokens:
            url = url.replace(URL_TOKEN_QUADKEY, index.to_quadkey())
        url = (
            url.replace(URL_TOKEN_LEVEL, str(index.level))
            .replace(URL_TOKEN_COL, str(index.col))
            .replace(URL_TOKEN_ROW, str(index.row))
        )
        if 's' in self._tokens:
            url = url.replace(URL_TOKEN_SUBDOMAIN, self.next_subdomain())
        if 'k' in self._tokens:
            url = url.replace(URL_TOKEN_KEY, self.api_key or '')
        return url

    def redact(self, url: str) -> str:
        """URL safe for logs and error messages (API key masked)."""
        if not self.api_key:
            return url
        return url.replace(
            self.api_key, mask_secret(self.api_key, API_KEY_VISIBLE_PREFIX_LEN)
        )
