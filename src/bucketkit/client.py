"""Bucket client: opens buckets and issues signed GET and PUT requests.

Every request looks its bucket up in the registry, builds the resource path,
signs the request with a single clock reading and hands it to the transport.
The status code of the response decides the outcome of each operation.
"""

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from bucketkit import metrics
from bucketkit.addressing import resource_path
from bucketkit.config import BucketOptions, build_bucket_config
from bucketkit.errors import (
    BucketNotFound,
    NoSuchBucket,
    TransportError,
    UnknownResponse,
    WrongRegion,
)
from bucketkit.properties import ObjectProperties, extract_properties
from bucketkit.registry import BucketRegistry
from bucketkit.signature import SERVICE_NAME, QueryValue, sign_request
from bucketkit.transport import HttpxTransport, Response, Transport

logger = logging.getLogger(__name__)

# Zero-result listing used to check that a bucket is reachable.
PROBE_QUERY: list[tuple[str, QueryValue]] = [("max-keys", 0)]


class ObjectStatus(str, Enum):
    """Outcome of a GET on an object."""

    FOUND = "found"
    NOT_MODIFIED = "not_modified"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ObjectResult:
    """Result of BucketClient.get().

    Attributes:
        status: Whether the object was returned, unchanged or missing.
        data: The object body; None unless status is FOUND.
        properties: ETag and expiration reported with the response. Empty
            when the object was not found.
    """

    status: ObjectStatus
    data: bytes | None = None
    properties: ObjectProperties = field(default_factory=ObjectProperties)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BucketClient:
    """Client for single-object GET and PUT against S3-compatible stores.

    Buckets must be opened before use. An open bucket has one registry
    entry and one transport connection pool; closing the bucket removes
    both.

    Attributes:
        registry: The registry of open buckets.
        transport: The HTTP transport.
        clock: Returns the current UTC time; read once per request.
        scheme: URL scheme of requests ("https" or "http").
    """

    def __init__(
        self,
        registry: BucketRegistry | None = None,
        transport: Transport | None = None,
        clock: Callable[[], datetime] = _utcnow,
        scheme: str = "https",
    ) -> None:
        self.registry = registry if registry is not None else BucketRegistry()
        self._owns_transport = transport is None
        self.transport: Transport = transport if transport is not None else HttpxTransport()
        self.clock = clock
        self.scheme = scheme

    async def __aenter__(self) -> "BucketClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def is_open(self, bucket: str) -> bool:
        return bucket in self.registry

    # -- Bucket lifecycle --------------------------------------------------------

    async def open(self, bucket: str, **options: Any) -> None:
        """Open a bucket and check that it is reachable.

        Valid options are ``access_key`` and ``secret_access_key``
        (mandatory), ``region``, ``host``, ``endpoint``, ``style``,
        ``connection_timeout`` (ms) and ``max_connections``.

        The bucket is registered, its connection pool started and a
        zero-result listing sent. If that probe does not succeed the bucket
        is closed again before the error is raised.

        Raises:
            MissingOption: If a mandatory option is absent.
            InvalidOption: If an option value is unusable.
            BucketAlreadyExists: If the bucket is already open.
            WrongRegion: If the store answers 301.
            NoSuchBucket: If the store answers 404.
            UnknownResponse: For any other status but 200.
            TransportError: If the probe could not be sent.
        """
        config = build_bucket_config(bucket, BucketOptions.from_options(options))
        self.registry.open(bucket, config)
        try:
            self.transport.start_pool(
                config.pool, config.connection_timeout, config.max_connections
            )
        except BaseException:
            self.registry.close(bucket)
            raise
        metrics.set_open_buckets(len(self.registry))

        try:
            resp = await self._request("open", "GET", bucket, query=PROBE_QUERY)
        except BaseException:
            await self._rollback(bucket)
            raise

        if resp.status == 200:
            logger.info(
                "Opened bucket %s (endpoint=%s, region=%s)",
                bucket,
                config.endpoint,
                config.region,
            )
            return

        if resp.status == 301:
            error: Exception = WrongRegion(bucket)
        elif resp.status == 404:
            error = NoSuchBucket(bucket)
        else:
            error = UnknownResponse(resp.status, resp.headers, resp.body)
        logger.warning("Opening bucket %s failed with status %d", bucket, resp.status)
        await self._rollback(bucket)
        raise error

    async def close(self, bucket: str) -> None:
        """Close a bucket and release its connection pool.

        Raises:
            BucketNotFound: If the bucket is not open.
        """
        config = self.registry.close(bucket)
        await self.transport.stop_pool(config.pool)
        metrics.set_open_buckets(len(self.registry))
        logger.info("Closed bucket %s", bucket)

    async def aclose(self) -> None:
        """Close every open bucket, then the transport if this client made it."""
        for bucket in self.registry.names():
            try:
                await self.close(bucket)
            except BucketNotFound:
                # Closed concurrently.
                continue
        if self._owns_transport:
            await self.transport.aclose()

    async def _rollback(self, bucket: str) -> None:
        try:
            await self.close(bucket)
        except BucketNotFound:
            pass

    # -- Object operations -----------------------------------------------------

    async def get(self, bucket: str, key: str, etag: str | None = None) -> ObjectResult:
        """Get an object from an open bucket.

        When ``etag`` is given it is sent as If-None-Match and an unchanged
        object yields NOT_MODIFIED instead of the data.

        Raises:
            BucketNotFound: If the bucket is not open.
            UnknownResponse: For statuses other than 200, 304 and 404.
            MalformedExpirationHeader: If the expiration header is unreadable.
            TransportError: If the request could not be sent.
        """
        headers = [("If-None-Match", etag)] if etag is not None else []
        resp = await self._request("get", "GET", bucket, key=key, headers=headers)

        if resp.status == 200:
            return ObjectResult(
                status=ObjectStatus.FOUND,
                data=resp.body,
                properties=extract_properties(resp.headers),
            )
        if resp.status == 304:
            return ObjectResult(
                status=ObjectStatus.NOT_MODIFIED,
                properties=extract_properties(resp.headers),
            )
        if resp.status == 404:
            return ObjectResult(status=ObjectStatus.NOT_FOUND)
        raise UnknownResponse(resp.status, resp.headers, resp.body)

    async def put(self, bucket: str, key: str, data: bytes) -> ObjectProperties:
        """Store an object in an open bucket.

        Returns:
            The properties the store reported for the new object.

        Raises:
            BucketNotFound: If the bucket is not open.
            UnknownResponse: For any status but 200.
            TransportError: If the request could not be sent.
        """
        resp = await self._request("put", "PUT", bucket, key=key, body=bytes(data))
        if resp.status == 200:
            return extract_properties(resp.headers)
        raise UnknownResponse(resp.status, resp.headers, resp.body)

    # -- Request assembly --------------------------------------------------------

    async def _request(
        self,
        operation: str,
        method: str,
        bucket: str,
        key: str | None = None,
        query: Iterable[tuple[str, QueryValue]] = (),
        headers: Iterable[tuple[str, str]] = (),
        body: bytes = b"",
    ) -> Response:
        config = self.registry.lookup(bucket)
        path = resource_path(config.path, key)
        request_headers = [
            ("Host", config.host),
            ("Content-Length", str(len(body))),
            *headers,
        ]
        signed = sign_request(
            method=method,
            path=path,
            query=query,
            headers=request_headers,
            payload=body,
            access_key=config.access_key,
            secret_access_key=config.secret_access_key,
            region=config.region,
            service=SERVICE_NAME,
            timestamp=self.clock(),
        )
        url = self._url(config.endpoint, path, signed.query_string)

        start = time.monotonic()
        try:
            resp = await self.transport.request(
                config.pool, method, url, request_headers + signed.headers, body
            )
        except TransportError:
            metrics.record_request(
                operation, "transport_error", time.monotonic() - start, len(body), 0
            )
            raise
        duration = time.monotonic() - start

        metrics.record_request(operation, str(resp.status), duration, len(body), len(resp.body))
        logger.debug(
            "%s %s -> %d",
            method,
            url,
            resp.status,
            extra={
                "bucket": bucket,
                "operation": operation,
                "key": key,
                "status": resp.status,
                "duration_ms": round(duration * 1000, 2),
            },
        )
        return resp

    def _url(self, endpoint: str, path: str, query_string: str) -> str:
        url = f"{self.scheme}://{endpoint}/{path}"
        if query_string:
            url += "?" + query_string
        return url
