"""Turn the supported call shapes into one RequestDescriptor."""

from __future__ import annotations

import codecs
import json
import re
from collections.abc import Mapping
from typing import Any, Optional, Union
from urllib.parse import urlencode

from pydantic import ValidationError
from yarl import URL

from ..errors import ConfigurationError
from ..models.config import DEFAULT_CONFIG, ClientConfig, RequestOptions
from ..models.request import AUTO_ENCODING, RAW_ENCODINGS, RequestDescriptor

RequestTarget = Union[str, URL, Mapping[str, Any], RequestOptions]

ALLOWED_SCHEMES = frozenset({"http", "https"})

# Spellings accepted for option keys, mapped to RequestOptions field names
OPTION_ALIASES = {
    "url": "uri",
    "connectTimeout": "connect_timeout",
    "followRedirects": "follow_redirects",
    "maxRedirects": "max_redirects",
}

# RFC 9110 token
_METHOD_RE = re.compile(r"^[!#$%&'*+.^_`|~0-9A-Za-z-]+$")


def _options_dict(value: Any) -> dict[str, Any]:
    """Convert an options value to a dict keyed by RequestOptions field names."""
    if value is None:
        return {}
    if isinstance(value, RequestOptions):
        return value.model_dump(exclude_unset=True)
    if isinstance(value, Mapping):
        return {OPTION_ALIASES.get(key, key): item for key, item in value.items()}
    raise ConfigurationError(f"Request options must be a mapping, got {type(value).__name__}")


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def query_pairs(query: Optional[Mapping[str, Any]]) -> list[tuple[str, str]]:
    """
    Flatten a query mapping into ordered key/value pairs.

    Sequence values repeat the key, None values are dropped, and booleans
    become 'true'/'false'. Key order is the order supplied.

    Args:
        query: Query mapping, or None

    Returns:
        List of (key, value) string pairs
    """
    pairs: list[tuple[str, str]] = []
    if not query:
        return pairs
    for key, value in query.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((str(key), _query_value(item)) for item in value if item is not None)
        else:
            pairs.append((str(key), _query_value(value)))
    return pairs


def _parse_uri(uri: Optional[str]) -> URL:
    if uri is None or not str(uri).strip():
        raise ConfigurationError("No request URI given")
    try:
        url = URL(str(uri).strip())
    except (TypeError, ValueError) as err:
        raise ConfigurationError(f"Malformed request URI: {uri!r}") from err
    if url.scheme.lower() not in ALLOWED_SCHEMES or not url.host:
        raise ConfigurationError(f"Malformed request URI: {uri!r} (expected an absolute http or https URI)")
    return url


def _merge_headers(*sources: Mapping[str, Any]) -> dict[str, str]:
    """Merge header mappings case-insensitively; later sources win."""
    merged: dict[str, tuple[str, str]] = {}
    for source in sources:
        for name, value in source.items():
            if value is None:
                continue
            merged[name.lower()] = (name, str(value))
    return dict(merged.values())


def _get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    name = name.lower()
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def _serialize_body(body: Any, headers: dict[str, str]) -> Optional[bytes]:
    """
    Serialize a request body to bytes.

    Mappings are form-encoded when the content type says so, otherwise
    JSON-encoded; a JSON content type is added if none was given.
    """
    if body is None:
        return None
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode("utf-8")

    content_type = _get_header(headers, "content-type")
    if content_type and content_type.lower().startswith("application/x-www-form-urlencoded"):
        if not isinstance(body, Mapping):
            raise ConfigurationError("Form-encoded body must be a mapping")
        return urlencode(query_pairs(body)).encode("ascii")

    if content_type is None:
        headers["Content-Type"] = "application/json"
    try:
        return json.dumps(body).encode("utf-8")
    except (TypeError, ValueError) as err:
        raise ConfigurationError(f"Request body is not JSON-serializable: {err}") from err


def _normalize_encoding(encoding: Optional[str]) -> Optional[str]:
    if encoding is None:
        return None
    name = encoding.strip().lower()
    if name in RAW_ENCODINGS:
        return None
    if name == AUTO_ENCODING:
        return AUTO_ENCODING
    try:
        codecs.lookup(name)
    except LookupError as err:
        raise ConfigurationError(f"Unknown encoding: {encoding!r}") from err
    return name


def normalize_request(
    target: Optional[RequestTarget],
    options: Optional[Union[Mapping[str, Any], RequestOptions]] = None,
    *,
    config: Optional[ClientConfig] = None,
    **overrides: Any,
) -> RequestDescriptor:
    """
    Build a RequestDescriptor from any supported call shape.

    Supported shapes:
        normalize_request("https://example.com/")
        normalize_request("https://example.com/", {"retries": 2})
        normalize_request({"uri": "https://example.com/", "query": {"q": "foo"}})
        normalize_request(RequestOptions(uri="https://example.com/"))

    A URI given as the first argument wins over a ``uri`` key in the
    options. Keyword overrides are applied last. Unset knobs fall back to
    ``config``.

    Args:
        target: URI string, or an options value containing the URI
        options: Optional options value when target is a URI
        config: Client defaults (DEFAULT_CONFIG if None)
        **overrides: Extra options, e.g. method="POST"

    Returns:
        Normalized RequestDescriptor

    Raises:
        ConfigurationError: If no URI is resolvable or an option is invalid
    """
    config = config or DEFAULT_CONFIG

    if isinstance(target, (str, URL)):
        merged = _options_dict(options)
        merged["uri"] = str(target)
    else:
        merged = _options_dict(target)
        merged.update(_options_dict(options))
    merged.update(_options_dict(overrides))

    try:
        opts = RequestOptions.model_validate(merged)
    except ValidationError as err:
        raise ConfigurationError(f"Invalid request options: {err}") from err

    url = _parse_uri(opts.uri)
    pairs = query_pairs(opts.query)
    if pairs:
        url = url.extend_query(pairs)

    method = opts.method.strip().upper()
    if not _METHOD_RE.match(method):
        raise ConfigurationError(f"Invalid HTTP method: {opts.method!r}")

    headers = _merge_headers(
        {"User-Agent": config.effective_user_agent},
        config.headers,
        opts.headers,
    )
    gzip = config.gzip if opts.gzip is None else opts.gzip
    if _get_header(headers, "accept-encoding") is None:
        headers["Accept-Encoding"] = "gzip, deflate" if gzip else "identity"

    body = _serialize_body(opts.body, headers)

    return RequestDescriptor(
        uri=str(url),
        method=method,
        query=tuple(pairs),
        headers=headers,
        body=body,
        encoding=_normalize_encoding(opts.encoding),
        gzip=gzip,
        retries=config.retries if opts.retries is None else opts.retries,
        timeout=config.timeout if opts.timeout is None else opts.timeout,
        connect_timeout=config.connect_timeout if opts.connect_timeout is None else opts.connect_timeout,
        follow_redirects=config.follow_redirects if opts.follow_redirects is None else opts.follow_redirects,
        max_redirects=config.max_redirects if opts.max_redirects is None else opts.max_redirects,
    )
