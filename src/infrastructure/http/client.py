from __future__ import annotations

import ssl
from typing import TYPE_CHECKING

import aiohttp
import certifi

from shared.constants import (
    DEFAULT_USER_AGENT,
    HTTP_CONNECTION_LIMIT,
    HTTP_TIMEOUT_DEFAULT,
)

if TYPE_CHECKING:
    from collections.abc import Mapping


def make_ssl_context() -> ssl.SSLContext:
    # SSL context with the certifi CA bundle
    return ssl.create_default_context(cafile=certifi.where())


def make_timeout(timeout_s: float = HTTP_TIMEOUT_DEFAULT) -> aiohttp.ClientTimeout:
    return aiohttp.ClientTimeout(
        total=timeout_s,
        connect=timeout_s,
        sock_connect=timeout_s,
        sock_read=timeout_s,
    )


def make_http_session(
    *,
    user_agent: str | None = DEFAULT_USER_AGENT,
    headers: Mapping[str, str] | None = None,
    timeout_s: float = HTTP_TIMEOUT_DEFAULT,
    limit: int = HTTP_CONNECTION_LIMIT,
) -> aiohttp.ClientSession:
    """Session used by tile fetchers. Must be created inside a running loop."""
    connector = aiohttp.TCPConnector(ssl=make_ssl_context(), limit=limit)
    session_headers: dict[str, str] = {}
    if user_agent:
        session_headers['User-Agent'] = user_agent
    if headers:
        session_headers.update(headers)
    return aiohttp.ClientSession(
        connector=connector,
        headers=session_headers,
        timeout=make_timeout(timeout_s),
    )
