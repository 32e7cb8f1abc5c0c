"""Aiohttp-backed transport performing a single request attempt."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from types import TracebackType

import aiohttp

from ..models.outcomes import ConnectionFailure, TimeoutFailure, TransportOutcome, TransportSuccess
from ..models.request import RequestDescriptor

logger = logging.getLogger(__name__)

# Content codings aiohttp decodes transparently when auto_decompress is on.
# It matches the lower-cased header value exactly; anything else (x-gzip,
# compress, stacked codings) reaches the caller still encoded.
DECOMPRESSED_ENCODINGS = frozenset({"gzip", "deflate", "br", "zstd"})


def outcome_from_exception(exc: BaseException) -> TransportOutcome:
    """
    Map a transport-level exception to a failure outcome.

    Timeouts are checked first: on Python 3.11+ TimeoutError is an OSError,
    and aiohttp's timeout errors are also ClientErrors.

    Args:
        exc: Exception raised while sending a request or reading its body

    Returns:
        TimeoutFailure or ConnectionFailure

    Raises:
        TypeError: If the exception is not a transport-level failure
    """
    if isinstance(exc, asyncio.TimeoutError):
        if isinstance(exc, aiohttp.ConnectionTimeoutError):
            phase = "connect"
        elif isinstance(exc, aiohttp.SocketTimeoutError):
            phase = "read"
        else:
            phase = "total"
        return TimeoutFailure(phase=phase, cause=exc)
    if isinstance(exc, (aiohttp.ClientError, OSError)):
        return ConnectionFailure(cause=exc)
    raise TypeError(f"Not a transport failure: {exc!r}")


# Exceptions that become failure outcomes instead of propagating
TRANSPORT_EXCEPTIONS = (
    aiohttp.ClientError,
    asyncio.TimeoutError,
    OSError,
)


def _collect_headers(raw_headers: Mapping[str, str]) -> dict[str, str]:
    """Lower-case header names, joining repeated headers with a comma."""
    headers: dict[str, str] = {}
    for name, value in raw_headers.items():
        key = name.lower()
        if key in headers:
            headers[key] = f"{headers[key]}, {value}"
        else:
            headers[key] = value
    return headers


class AiohttpTransport:
    """
    Transport that performs exactly one HTTP attempt with aiohttp.

    Features:
    - Transparent gzip, deflate, br and zstd decompression
    - Independent connect-phase and total timeouts
    - Redirect following with the effective URL reported back
    - Connection and timeout problems returned as outcomes, never raised

    Retries are not done here; see RetryController.

    Example:
        async with AiohttpTransport() as transport:
            outcome = await transport.send(RequestDescriptor(uri="https://example.com"))
    """

    def __init__(
        self,
        proxy: str | None = None,
        connection_limit: int = 100,
        connection_limit_per_host: int = 10,
    ) -> None:
        """
        Initialize the transport.

        Args:
            proxy: Proxy URL (http://)
            connection_limit: Total connection limit of the connector
            connection_limit_per_host: Per-host connection limit
        """
        self._proxy = proxy
        self._connection_limit = connection_limit
        self._connection_limit_per_host = connection_limit_per_host
        self._session: aiohttp.ClientSession | None = None

    @property
    def is_open(self) -> bool:
        return self._session is not None and not self._session.closed

    async def __aenter__(self) -> AiohttpTransport:
        """Enter async context and create session."""
        connector = aiohttp.TCPConnector(
            limit=self._connection_limit,
            limit_per_host=self._connection_limit_per_host,
            ttl_dns_cache=300,  # DNS cache TTL
        )
        self._session = aiohttp.ClientSession(connector=connector, auto_decompress=True)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def send(self, descriptor: RequestDescriptor) -> TransportOutcome:
        """
        Send one attempt of the described request.

        Args:
            descriptor: Normalized request

        Returns:
            TransportSuccess for any received response (any status),
            otherwise ConnectionFailure or TimeoutFailure
        """
        if self._session is None:
            raise RuntimeError("Transport not initialized. Use 'async with' context manager.")

        timeout = aiohttp.ClientTimeout(
            total=descriptor.timeout,
            connect=descriptor.connect_timeout,
            sock_connect=descriptor.connect_timeout,
        )
        logger.debug(f"{descriptor.method} {descriptor.uri}")

        try:
            async with self._session.request(
                descriptor.method,
                descriptor.uri,
                headers=descriptor.headers,
                data=descriptor.body,
                timeout=timeout,
                allow_redirects=descriptor.follow_redirects and descriptor.max_redirects > 0,
                max_redirects=max(descriptor.max_redirects, 1),
                proxy=self._proxy,
            ) as response:
                body = await response.read()
                content_encoding = response.headers.get("Content-Encoding", "").lower()
                return TransportSuccess(
                    status=response.status,
                    headers=_collect_headers(response.headers),
                    body=body,
                    effective_uri=str(response.url),
                    decompressed=content_encoding in DECOMPRESSED_ENCODINGS,
                )
        except TRANSPORT_EXCEPTIONS as e:
            logger.debug(f"Transport failure for {descriptor.method} {descriptor.uri}: {e!r}")
            return outcome_from_exception(e)
