"""Retry, classification and normalization core."""

from .classifier import ResponseClassifier
from .client import ResilientHttpClient, delete, get, head, options, patch, post, put, request
from .decoder import ContentDecoder
from .normalizer import normalize_request, query_pairs
from .redirect import RedirectTracker, normalize_url
from .retry import BackoffPolicy, RetryController, RetryProgress, RetryState

__all__ = [
    "BackoffPolicy",
    "ContentDecoder",
    "RedirectTracker",
    "ResilientHttpClient",
    "ResponseClassifier",
    "RetryController",
    "RetryProgress",
    "RetryState",
    "delete",
    "get",
    "head",
    "normalize_request",
    "normalize_url",
    "options",
    "patch",
    "post",
    "put",
    "query_pairs",
    "request",
]
