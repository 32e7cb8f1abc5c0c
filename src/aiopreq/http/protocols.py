"""Protocol definitions for the transport abstraction."""

from __future__ import annotations

from typing import Protocol

from ..models.outcomes import TransportOutcome
from ..models.request import RequestDescriptor


class TransportAdapter(Protocol):
    """
    Protocol for transports that perform one network attempt.

    This abstraction allows for:
    - Fake implementations in tests (fixed delays, failures, redirect chains)
    - Different backends (aiohttp, httpx, etc.)
    - Retry and classification logic that never touches sockets
    """

    async def send(self, descriptor: RequestDescriptor) -> TransportOutcome:
        """
        Perform a single attempt of the described request.

        Args:
            descriptor: Normalized request to send

        Returns:
            TransportSuccess for any received response, whatever its status;
            ConnectionFailure or TimeoutFailure if no response was received
        """
        ...
