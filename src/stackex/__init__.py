"""
stackex - Stack Exchange API client

A client for the Stack Exchange JSON/HTTP API that honours the server's
backoff hints and quota counters, with synchronous and callback-based
asynchronous calls and typed decoding of response items.
"""

from stackex.api import APIClient
from stackex.codec import APIResponse, Convertible, decode_value, encode_value, to_json_text
from stackex.core import (
    APIError,
    BackoffBehavior,
    BackoffError,
    ClientConfig,
    DecodeError,
    DispatchConfig,
    EncodingError,
    StackExError,
    TransportError,
    __version__,
    setup_logging,
)
from stackex.models import BadgeCount, Comment, Question, Site, User, UserInfoType, UserType

__all__ = [
    "APIClient",
    "APIError",
    "APIResponse",
    "BackoffBehavior",
    "BackoffError",
    "BadgeCount",
    "ClientConfig",
    "Comment",
    "Convertible",
    "DecodeError",
    "DispatchConfig",
    "EncodingError",
    "Question",
    "Site",
    "StackExError",
    "TransportError",
    "User",
    "UserInfoType",
    "UserType",
    "__version__",
    "decode_value",
    "encode_value",
    "setup_logging",
    "to_json_text",
]
