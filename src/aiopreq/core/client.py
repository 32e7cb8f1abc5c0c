"""Resilient HTTP client: the public entry point."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any, Callable, Coroutine, Optional, Union

from ..http.protocols import TransportAdapter
from ..http.transport import AiohttpTransport
from ..models.config import DEFAULT_CONFIG, ClientConfig, RequestOptions
from ..models.outcomes import TransportSuccess
from ..models.request import RequestDescriptor, ResolvedResponse
from .classifier import ResponseClassifier
from .decoder import ContentDecoder
from .normalizer import RequestTarget, normalize_request
from .redirect import RedirectTracker
from .retry import BackoffPolicy, RetryController, Sleep

logger = logging.getLogger(__name__)

Options = Optional[Union[Mapping[str, Any], RequestOptions]]


class ResilientHttpClient:
    """
    Uniform awaitable request API with retries and response normalization.

    Features:
    - One call shape for a bare URI or a structured options value
    - Exponential backoff retry for connection failures and timeouts
    - Every received status resolved as a response; failures as RequestError(504)
    - content-location set when redirects changed the effective URI
    - Raw-bytes or decoded-text bodies; stale content-encoding headers removed

    Example:
        async with ResilientHttpClient(ClientConfig(retries=2)) as client:
            response = await client.get("https://example.com", query={"q": "foo"})
            print(response.status, response.body)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[TransportAdapter] = None,
        *,
        proxy: Optional[str] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Immutable defaults shared by every request
            transport: Transport to use; an AiohttpTransport owned by the
                client is created if None
            proxy: Proxy URL for the default transport
            sleep: Awaitable sleep used for backoff, injectable for tests
        """
        self._config = config or DEFAULT_CONFIG
        self._owns_transport = transport is None
        self._transport: TransportAdapter = transport or AiohttpTransport(proxy=proxy)
        self._policy = BackoffPolicy.from_config(self._config)
        self._classifier = ResponseClassifier()
        self._redirects = RedirectTracker()
        self._decoder = ContentDecoder()
        self._sleep = sleep

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def transport(self) -> TransportAdapter:
        return self._transport

    async def __aenter__(self) -> ResilientHttpClient:
        """Enter async context and open the owned transport."""
        if self._owns_transport:
            await self._transport.__aenter__()  # type: ignore[attr-defined]
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close the owned transport."""
        if self._owns_transport:
            await self._transport.__aexit__(exc_type, exc_val, exc_tb)  # type: ignore[attr-defined]

    def build(self, target: Optional[RequestTarget], options: Options = None, **kwargs: Any) -> RequestDescriptor:
        """Normalize call inputs against this client's config."""
        return normalize_request(target, options, config=self._config, **kwargs)

    def _resolve(self, descriptor: RequestDescriptor, success: TransportSuccess) -> ResolvedResponse:
        headers = {name.lower(): value for name, value in success.headers.items()}
        body, headers = self._decoder.decode(success.body, headers, descriptor.encoding, success.decompressed)
        headers, location = self._redirects.annotate(headers, descriptor.uri, success.effective_uri)
        return ResolvedResponse(
            status=success.status,
            headers=headers,
            body=body,
            content_location=location,
            uri=descriptor.uri,
            method=descriptor.method,
        )

    async def send(self, descriptor: RequestDescriptor) -> ResolvedResponse:
        """
        Send an already normalized request.

        Args:
            descriptor: Request built by build() or normalize_request()

        Returns:
            ResolvedResponse for any received status

        Raises:
            RequestError: With status 504 after connection or timeout
                failures exhausted the retry budget
        """
        controller = RetryController(self._transport, self._policy, self._classifier, sleep=self._sleep)
        success = await controller.run(descriptor)
        response = self._resolve(descriptor, success)
        logger.debug(f"{descriptor.method} {descriptor.uri} -> {response.status}")
        return response

    async def request(self, target: Optional[RequestTarget], options: Options = None, **kwargs: Any) -> ResolvedResponse:
        """
        Perform a request.

        Args:
            target: URI string, or an options value containing ``uri``
            options: Options value when target is a URI
            **kwargs: Option overrides (method, query, headers, body,
                retries, timeout, connect_timeout, encoding, gzip, ...)

        Returns:
            ResolvedResponse for any received status

        Raises:
            ConfigurationError: If the input is invalid; nothing is sent
            RequestError: With status 504 after transport failures
        """
        return await self.send(self.build(target, options, **kwargs))

    async def get(self, target: Optional[RequestTarget], options: Options = None, **kwargs: Any) -> ResolvedResponse:
        return await self.request(target, options, method="GET", **kwargs)

    async def post(self, target: Optional[RequestTarget], options: Options = None, **kwargs: Any) -> ResolvedResponse:
        return await self.request(target, options, method="POST", **kwargs)

    async def put(self, target: Optional[RequestTarget], options: Options = None, **kwargs: Any) -> ResolvedResponse:
        return await self.request(target, options, method="PUT", **kwargs)

    async def patch(self, target: Optional[RequestTarget], options: Options = None, **kwargs: Any) -> ResolvedResponse:
        return await self.request(target, options, method="PATCH", **kwargs)

    async def delete(self, target: Optional[RequestTarget], options: Options = None, **kwargs: Any) -> ResolvedResponse:
        return await self.request(target, options, method="DELETE", **kwargs)

    async def head(self, target: Optional[RequestTarget], options: Options = None, **kwargs: Any) -> ResolvedResponse:
        return await self.request(target, options, method="HEAD", **kwargs)

    async def options(self, target: Optional[RequestTarget], options: Options = None, **kwargs: Any) -> ResolvedResponse:
        return await self.request(target, options, method="OPTIONS", **kwargs)


async def request(
    target: Optional[RequestTarget],
    options: Options = None,
    *,
    config: Optional[ClientConfig] = None,
    **kwargs: Any,
) -> ResolvedResponse:
    """
    Perform a single request with a short-lived client.

    Example:
        response = await request("https://example.com", {"retries": 3})
        response = await request({"uri": "https://example.com", "encoding": None})
    """
    async with ResilientHttpClient(config) as client:
        return await client.request(target, options, **kwargs)


def _shortcut(method: str) -> Callable[..., Coroutine[Any, Any, ResolvedResponse]]:
    async def shortcut(
        target: Optional[RequestTarget],
        options: Options = None,
        *,
        config: Optional[ClientConfig] = None,
        **kwargs: Any,
    ) -> ResolvedResponse:
        return await request(target, options, config=config, method=method, **kwargs)

    shortcut.__name__ = shortcut.__qualname__ = method.lower()
    shortcut.__doc__ = f"Perform a {method} request with a short-lived client."
    return shortcut


get = _shortcut("GET")
post = _shortcut("POST")
put = _shortcut("PUT")
patch = _shortcut("PATCH")
delete = _shortcut("DELETE")
head = _shortcut("HEAD")
options = _shortcut("OPTIONS")
