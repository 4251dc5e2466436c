from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import aiohttp

from infrastructure.http import make_http_session, make_timeout
from shared.constants import (
    DEFAULT_USER_AGENT,
    HTTP_OK_MAX,
    HTTP_OK_MIN,
    HTTP_TIMEOUT_DEFAULT,
)
from shared.errors import FetchFailedError
from tiles.request import TileUrlTemplate

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from tiles.index import TileIndex

logger = logging.getLogger(__name__)

FetchOverride = Callable[[str], Awaitable[bytes]]


@runtime_checkable
class TileProvider(Protocol):
    """Anything that turns a tile index into bytes or fails."""

    async def fetch(self, index: TileIndex) -> bytes: ...


class TileFetcher:
    """Retrieves raw tile bytes for an index from a templated URL.

    No retries: a failed request raises FetchFailedError and retry policy is
    up to the caller. ``fetch_override`` replaces the HTTP transport with any
    ``async (url) -> bytes`` callable.
    """

    def __init__(
        self,
        template: TileUrlTemplate | str,
        *,
        subdomains: Sequence[str] = (),
        api_key: str | None = None,
        headers: Mapping[str, str] | None = None,
        user_agent: str | None = DEFAULT_USER_AGENT,
        session: aiohttp.ClientSession | None = None,
        timeout_s: float = HTTP_TIMEOUT_DEFAULT,
        fetch_override: FetchOverride | None = None,
    ) -> None:
        if isinstance(template, str):
            template = TileUrlTemplate(template, subdomains, api_key)
        self.template = template
        self.headers = dict(headers or {})
        if user_agent:
            self.headers.setdefault('User-Agent', user_agent)
        self.timeout_s = timeout_s
        self._session = session
        self._owns_session = session is None
        self._fetch_override = fetch_override

    def __repr__(self) -> str:
        return f'TileFetcher({self.template!r})'

    def resolve_url(self, index: TileIndex) -> str:
        return self.template.resolve(index)

    async def fetch(self, index: TileIndex) -> bytes:
        url = self.resolve_url(index)
        if self._fetch_override is not None:
            return await self._fetch_with_override(url)
        return await self._fetch_http(url)

    async def _fetch_with_override(self, url: str) -> bytes:
        try:
            return await self._fetch_override(url)
        except FetchFailedError:
            raise
        except Exception as exc:
            raise FetchFailedError(self.template.redact(url), exc) from exc

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = make_http_session(user_agent=None, timeout_s=self.timeout_s)
            self._owns_session = True
        return self._session

    async def _fetch_http(self, url: str) -> bytes:
        display_url = self.template.redact(url)
        client = self._get_session()
        try:
            resp = await client.get(
                url, headers=self.headers, timeout=make_timeout(self.timeout_s)
            )
            try:
                status = resp.status
                if not HTTP_OK_MIN <= status < HTTP_OK_MAX:
                    raise FetchFailedError(display_url, f'HTTP {status}', status=status)
                data = await resp.read()
            finally:
                resp.release()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.debug('Transport error for %s: %r', display_url, exc)
            raise FetchFailedError(display_url, exc) from exc

        logger.debug('Fetched %s (%d bytes)', display_url, len(data))
        return data

    async def close(self) -> None:
        """Close the HTTP session if this fetcher created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> TileFetcher:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
