"""HTTP client factory shared by the OAuth2 client.

All outbound calls go through `create_http_client()` so tests can swap in a
fake by patching this one name in the importing module.
"""

from collections.abc import Mapping

import httpx

DEFAULT_TIMEOUT = 30.0


def create_http_client(
    headers: Mapping[str, str] | None = None,
    timeout: httpx.Timeout | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with socialauth defaults.

    Redirects are followed and a 30 second timeout applies unless `timeout` is
    given. Use it as an async context manager so the connection pool is closed.
    """
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=timeout if timeout is not None else httpx.Timeout(DEFAULT_TIMEOUT),
        headers=dict(headers) if headers else None,
    )
