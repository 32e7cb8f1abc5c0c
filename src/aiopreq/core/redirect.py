"""Detect whether redirects changed the effective URI."""

from __future__ import annotations

import logging
from typing import Optional

from yarl import URL

logger = logging.getLogger(__name__)


def normalize_url(url: str) -> str:
    """
    Normalize a URL for consistent comparison.

    Lower-cases scheme and host, drops default ports and fragments, turns an
    empty path into "/", and canonicalizes percent-encoding.

    Args:
        url: The URL to normalize

    Returns:
        Normalized URL string
    """
    try:
        parsed = URL(url)
    except (TypeError, ValueError):
        return url

    if not parsed.is_absolute():
        return str(parsed.with_fragment(None))

    host = (parsed.raw_host or "").lower()
    if ":" in host:
        host = f"[{host}]"  # IPv6 literal
    netloc = host if parsed.is_default_port() else f"{host}:{parsed.port}"
    normalized = f"{parsed.scheme.lower()}://{netloc}{parsed.raw_path or '/'}"
    if parsed.raw_query_string:
        normalized += f"?{parsed.raw_query_string}"
    return normalized


class RedirectTracker:
    """
    Compares the requested URI with the URI the transport ended up at.

    Example:
        tracker = RedirectTracker()
        tracker.content_location("https://a.org/", "https://a.org/wiki")
        # -> "https://a.org/wiki"
    """

    def content_location(self, requested_uri: str, effective_uri: Optional[str]) -> Optional[str]:
        """
        Decide the content-location annotation.

        Args:
            requested_uri: URI the caller asked for
            effective_uri: URI reached after redirects

        Returns:
            effective_uri if it differs from requested_uri, otherwise None
        """
        if not effective_uri:
            return None
        if normalize_url(requested_uri) == normalize_url(effective_uri):
            return None
        logger.debug(f"Redirected from {requested_uri} to {effective_uri}")
        return effective_uri

    def annotate(
        self,
        headers: dict[str, str],
        requested_uri: str,
        effective_uri: Optional[str],
    ) -> tuple[dict[str, str], Optional[str]]:
        """
        Add a content-location header when the effective URI changed.

        Headers are expected to have lower-cased names. When the URI did not
        change, a content-location sent by the server is left untouched.

        Returns:
            (headers, content_location)
        """
        location = self.content_location(requested_uri, effective_uri)
        if location is None:
            return headers, None
        annotated = dict(headers)
        annotated["content-location"] = location
        return annotated, location
