"""httpx adapter — implements the HttpTransport port."""

from __future__ import annotations

from typing import Mapping

import httpx

from repo_explorer.domain.exceptions import TransportFailure
from repo_explorer.domain.ports.http_transport import RawResponse


class HttpxTransport:
    """Concrete ``HttpTransport`` backed by a shared ``httpx.AsyncClient``.

    The client is owned by the caller; pass one built with
    ``transport=httpx.MockTransport(...)`` to run without a network.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def get(self, url: str, headers: Mapping[str, str]) -> RawResponse:
        """GET *url* and return status plus raw body bytes."""
        try:
            resp = await self._client.get(url, headers=dict(headers))
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportFailure(f"Network error fetching {url}: {exc}") from exc
        except ValueError as exc:
            # non-ASCII header values and unparsable URLs fail while building the request
            raise TransportFailure(f"Could not build request for {url}: {exc}") from exc

        return RawResponse(
            status_code=resp.status_code,
            content=resp.content,
            encoding=resp.encoding,
            headers=dict(resp.headers),
        )
