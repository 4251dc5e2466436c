"""HTTP client infrastructure."""
from infrastructure.http.client import make_http_session, make_ssl_context, make_timeout

__all__ = [
    'make_http_session',
    'make_ssl_context',
    'make_timeout',
]
