"""
aiopreq - Resilient awaitable HTTP requests with retries and uniform errors.

Usage:
    from aiopreq import ClientConfig, RequestError, ResilientHttpClient, get

    response = await get("https://example.com", retries=3)

    async with ResilientHttpClient(ClientConfig(timeout="10s")) as client:
        try:
            response = await client.request({"uri": "https://example.com", "query": {"q": "foo"}})
        except RequestError as e:
            print(e.status, e.message)
"""

__version__ = "1.0.0"

from .core import (
    BackoffPolicy,
    ContentDecoder,
    RedirectTracker,
    ResilientHttpClient,
    ResponseClassifier,
    RetryController,
    delete,
    get,
    head,
    normalize_request,
    options,
    patch,
    post,
    put,
    request,
)
from .errors import AiopreqError, ConfigurationError, RequestError
from .http import AiohttpTransport, TransportAdapter
from .models import (
    ClientConfig,
    ConnectionFailure,
    RequestDescriptor,
    RequestOptions,
    ResolvedResponse,
    TimeoutFailure,
    TransportOutcome,
    TransportSuccess,
)

__all__ = [
    "__version__",
    # Client
    "ResilientHttpClient",
    "request",
    "get",
    "post",
    "put",
    "patch",
    "delete",
    "head",
    "options",
    # Config
    "ClientConfig",
    "RequestOptions",
    # Errors
    "AiopreqError",
    "ConfigurationError",
    "RequestError",
    # Models
    "RequestDescriptor",
    "ResolvedResponse",
    "TransportOutcome",
    "TransportSuccess",
    "ConnectionFailure",
    "TimeoutFailure",
    # Components
    "AiohttpTransport",
    "BackoffPolicy",
    "ContentDecoder",
    "RedirectTracker",
    "ResponseClassifier",
    "RetryController",
    "TransportAdapter",
    "normalize_request",
]
