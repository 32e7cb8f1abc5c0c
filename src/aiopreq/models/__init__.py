"""Aiopreq configuration, request and outcome models."""

from .config import DEFAULT_CONFIG, DEFAULT_USER_AGENT, ClientConfig, Duration, RequestOptions
from .outcomes import ConnectionFailure, TimeoutFailure, TransportOutcome, TransportSuccess
from .request import AUTO_ENCODING, RAW_ENCODINGS, RequestDescriptor, ResolvedResponse

__all__ = [
    # Config
    "ClientConfig",
    "DEFAULT_CONFIG",
    "DEFAULT_USER_AGENT",
    "Duration",
    "RequestOptions",
    # Request / response
    "AUTO_ENCODING",
    "RAW_ENCODINGS",
    "RequestDescriptor",
    "ResolvedResponse",
    # Outcomes
    "ConnectionFailure",
    "TimeoutFailure",
    "TransportOutcome",
    "TransportSuccess",
]
