"""Outcomes of a single transport attempt."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class TransportSuccess:
    """
    A response was received, whatever its status.

    Attributes:
        status: HTTP status code (200, 404, 500, ...)
        headers: Response headers with lower-cased names
        body: Raw body bytes, already decompressed if the transport did so
        effective_uri: Final URI after any redirects
        decompressed: True if the transport removed a content-encoding
    """

    status: int
    headers: dict[str, str]
    body: bytes
    effective_uri: str
    decompressed: bool = False


@dataclass(frozen=True)
class ConnectionFailure:
    """Socket, DNS or connection-level failure; no response was received."""

    cause: BaseException

    def describe(self) -> str:
        return f"Connection failed: {self.cause!r}"


@dataclass(frozen=True)
class TimeoutFailure:
    """A connect-phase or total timeout expired."""

    phase: str
    cause: BaseException | None = field(default=None, compare=False)

    def describe(self) -> str:
        return f"Request timed out during {self.phase} phase"


TransportOutcome = Union[TransportSuccess, ConnectionFailure, TimeoutFailure]
