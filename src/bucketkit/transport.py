"""HTTP transport for bucketkit.

The transport owns the connection pools. bucketkit only tells it which pool
to use and how to configure it; pooling and timeouts are enforced by httpx.
"""

import logging
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from bucketkit.errors import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Response:
    """A complete HTTP response.

    Attributes:
        status: HTTP status code.
        headers: Response headers as (name, value) pairs in wire order.
        body: The response body.
    """

    status: int
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes = b""

    def header(self, name: str) -> str | None:
        """Return the first value of a header, matched case-insensitively."""
        lower_name = name.lower()
        for key, value in self.headers:
            if key.lower() == lower_name:
                return value
        return None


class Transport(Protocol):
    """What bucketkit needs from an HTTP transport."""

    def start_pool(self, name: str, timeout_ms: int, max_connections: int) -> None: ...

    async def request(
        self,
        pool: str,
        method: str,
        url: str,
        headers: list[tuple[str, str]],
        body: bytes,
    ) -> Response: ...

    async def stop_pool(self, name: str) -> None: ...

    async def aclose(self) -> None: ...


class HttpxTransport:
    """Transport backed by one httpx.AsyncClient per connection pool.

    Attributes:
        transport: Optional httpx transport shared by every pool, e.g. an
            httpx.ASGITransport for in-process servers.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.transport = transport
        self._pools: dict[str, httpx.AsyncClient] = {}

    def start_pool(self, name: str, timeout_ms: int, max_connections: int) -> None:
        """Create a connection pool.

        Raises:
            TransportError: If a pool with that name already exists.
        """
        if name in self._pools:
            raise TransportError(f"Connection pool already started: {name}")
        self._pools[name] = httpx.AsyncClient(
            transport=self.transport,
            timeout=httpx.Timeout(timeout_ms / 1000),
            limits=httpx.Limits(max_connections=max_connections),
        )
        logger.debug(
            "Started pool %s (timeout=%dms, max_connections=%d)",
            name,
            timeout_ms,
            max_connections,
        )

    async def request(
        self,
        pool: str,
        method: str,
        url: str,
        headers: list[tuple[str, str]],
        body: bytes,
    ) -> Response:
        """Send a request through a pool and read the whole response.

        Raises:
            TransportError: If the pool is gone or the request fails before a
                response arrives.
        """
        client = self._pools.get(pool)
        if client is None or client.is_closed:
            raise TransportError(f"Connection pool not available: {pool}")

        try:
            resp = await client.request(method, url, headers=headers, content=body)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        return Response(
            status=resp.status_code,
            headers=[
                (name.decode("latin-1"), value.decode("latin-1"))
                for name, value in resp.headers.raw
            ],
            body=resp.content,
        )

    async def stop_pool(self, name: str) -> None:
        """Close a pool. Unknown names are ignored."""
        client = self._pools.pop(name, None)
        if client is not None:
            await client.aclose()
            logger.debug("Stopped pool %s", name)

    async def aclose(self) -> None:
        """Close every pool."""
        for name in list(self._pools):
            await self.stop_pool(name)
