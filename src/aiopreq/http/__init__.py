"""Transport adapters for aiopreq."""

from .protocols import TransportAdapter
from .transport import AiohttpTransport, outcome_from_exception

__all__ = [
    "AiohttpTransport",
    "TransportAdapter",
    "outcome_from_exception",
]
