"""Body decoding and encoding-header normalization."""

from __future__ import annotations

import logging
from typing import Optional, Union

from charset_normalizer import from_bytes as detect_encoding

from ..models.request import AUTO_ENCODING

logger = logging.getLogger(__name__)

DEFAULT_CHARSET = "utf-8"

# Headers describing the compressed payload, stale once it is decompressed
COMPRESSION_HEADERS = ("content-encoding", "content-length")


def charset_from_content_type(content_type: Optional[str]) -> Optional[str]:
    """
    Extract the charset parameter of a Content-Type header.

    Args:
        content_type: Content-Type header value

    Returns:
        Charset name, or None if not declared
    """
    if not content_type:
        return None
    for part in content_type.split(";")[1:]:
        part = part.strip()
        if part.lower().startswith("charset="):
            charset = part.split("=", 1)[1].strip().strip("\"'")
            return charset or None
    return None


class ContentDecoder:
    """
    Decides the final body representation and fixes encoding headers.

    - encoding None: body stays raw bytes, whatever the content type
    - encoding "auto": decode with the declared charset, else UTF-8
    - any other encoding: decode with that codec

    Fallback chain for "auto":
    1. Content-Type header charset
    2. UTF-8
    3. charset-normalizer detection
    4. UTF-8 with replacement
    """

    def __init__(self, default_charset: str = DEFAULT_CHARSET) -> None:
        self._default_charset = default_charset

    def _decode_auto(self, content: bytes, content_type: Optional[str]) -> str:
        declared = charset_from_content_type(content_type)
        for encoding in (declared, self._default_charset):
            if not encoding:
                continue
            try:
                return content.decode(encoding)
            except (UnicodeDecodeError, LookupError):
                logger.debug(f"Failed to decode with encoding: {encoding}")

        result = detect_encoding(content).best()
        if result is not None:
            logger.debug(f"Detected encoding: {result.encoding}")
            return str(result)

        return content.decode(self._default_charset, errors="replace")

    def decode_body(
        self,
        content: bytes,
        encoding: Optional[str],
        content_type: Optional[str] = None,
    ) -> Union[bytes, str]:
        """
        Decode a response body according to the caller's directive.

        Args:
            content: Raw body bytes
            encoding: None, "auto" or a codec name
            content_type: Content-Type header value

        Returns:
            bytes if encoding is None, otherwise str
        """
        if encoding is None:
            return bytes(content)
        if not content:
            return ""
        if encoding == AUTO_ENCODING:
            return self._decode_auto(content, content_type)
        return content.decode(encoding, errors="replace")

    def normalize_headers(self, headers: dict[str, str], decompressed: bool) -> dict[str, str]:
        """
        Drop headers that would misdescribe a decompressed body.

        Args:
            headers: Response headers with lower-cased names
            decompressed: True if the transport already removed the coding

        Returns:
            New header dict
        """
        if not decompressed:
            return dict(headers)
        return {name: value for name, value in headers.items() if name not in COMPRESSION_HEADERS}

    def decode(
        self,
        content: bytes,
        headers: dict[str, str],
        encoding: Optional[str],
        decompressed: bool = False,
    ) -> tuple[Union[bytes, str], dict[str, str]]:
        """
        Decode the body and normalize headers in one step.

        Returns:
            (body, headers)
        """
        body = self.decode_body(content, encoding, headers.get("content-type"))
        return body, self.normalize_headers(headers, decompressed)
