"""Request descriptor and resolved response types."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional, Union

# Encoding directive: decode using the response's declared charset
AUTO_ENCODING = "auto"

# Encoding directives that keep the body as raw bytes
RAW_ENCODINGS = frozenset({"none", "null", "binary", "raw"})


@dataclass(frozen=True)
class RequestDescriptor:
    """
    Canonical description of one logical request.

    Built by normalize_request() from whatever call shape the caller used;
    every other component only ever sees this type.

    Attributes:
        method: Upper-case HTTP method
        uri: Absolute URI with the serialized query merged in
        query: Query pairs in the order they were supplied
        headers: Request headers
        body: Serialized request body
        encoding: None keeps raw bytes, "auto" decodes per response charset,
            anything else is a codec name
        gzip: Request compressed transfer
        retries: Additional attempts allowed after a transport failure
        timeout: Total request timeout in seconds
        connect_timeout: Connect-phase timeout in seconds
        follow_redirects: Let the transport follow 3xx responses
        max_redirects: Redirect hop limit when following
    """

    uri: str
    method: str = "GET"
    query: tuple[tuple[str, str], ...] = ()
    headers: dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    encoding: Optional[str] = AUTO_ENCODING
    gzip: bool = False
    retries: int = 0
    timeout: Optional[float] = None
    connect_timeout: Optional[float] = None
    follow_redirects: bool = True
    max_redirects: int = 10

    @property
    def wants_raw_body(self) -> bool:
        """Check if the caller asked for the body as raw bytes."""
        return self.encoding is None


@dataclass(frozen=True)
class ResolvedResponse:
    """
    Response handed back to the caller.

    Any received status resolves here, including 4xx and 5xx; callers
    inspect status themselves.

    Attributes:
        status: HTTP status code
        headers: Response headers with lower-cased names
        body: Raw bytes or decoded text, depending on the encoding directive
        content_location: Effective URI, set only if a redirect changed it
        uri: URI that was requested
        method: HTTP method that was used
    """

    status: int
    headers: dict[str, str]
    body: Union[bytes, str]
    content_location: Optional[str] = None
    uri: Optional[str] = None
    method: Optional[str] = None

    @property
    def ok(self) -> bool:
        """Check if status is below 400."""
        return self.status < 400

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")

    @property
    def text(self) -> str:
        """Body as text, decoding raw bytes as UTF-8 if needed."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8", errors="replace")
        return self.body

    def json(self) -> Any:
        """Parse the body as JSON."""
        return json.loads(self.body)
