"""Classification of transport outcomes."""

from __future__ import annotations

from ..errors import GATEWAY_TIMEOUT, RequestError
from ..models.outcomes import ConnectionFailure, TimeoutFailure, TransportOutcome, TransportSuccess
from ..models.request import RequestDescriptor


class ResponseClassifier:
    """
    Maps every transport outcome to a result or a RequestError.

    Any received status passes through unmodified; a 404 or 500 is not an
    error at this layer. Connection and timeout failures both become
    RequestError(504), with the original exception kept as the cause.
    """

    def is_retryable(self, outcome: TransportOutcome) -> bool:
        """Check if an outcome is a transport-level failure."""
        return isinstance(outcome, (ConnectionFailure, TimeoutFailure))

    def describe(self, outcome: TransportOutcome) -> str:
        if isinstance(outcome, TransportSuccess):
            return f"HTTP {outcome.status}"
        return outcome.describe()

    def classify(self, descriptor: RequestDescriptor, outcome: TransportOutcome) -> TransportSuccess:
        """
        Classify one outcome.

        Args:
            descriptor: Request the outcome belongs to
            outcome: Result of a transport attempt

        Returns:
            The outcome itself if a response was received

        Raises:
            RequestError: With status 504 for connection or timeout failures
        """
        if isinstance(outcome, TransportSuccess):
            return outcome
        if isinstance(outcome, (ConnectionFailure, TimeoutFailure)):
            raise RequestError(
                GATEWAY_TIMEOUT,
                outcome.describe(),
                cause=outcome.cause,
                uri=descriptor.uri,
                method=descriptor.method,
            ) from outcome.cause
        raise TypeError(f"Unknown transport outcome: {outcome!r}")
