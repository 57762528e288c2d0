"""Decoding of the API's response envelope.

Every response is wrapped in the same object::

    {"items": [...], "has_more": false, "quota_remaining": 9997, "quota_max": 10000,
     "backoff": 10, "error_id": 502, "error_name": "throttle_violation", "error_message": "..."}

Decoding is two-track: a body carrying ``error_id`` still decodes
successfully into an envelope whose ``is_error`` is True, so the caller can
apply its quota and backoff fields before surfacing the API error.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import pandas as pd

from stackex.codec.values import decode_items, encode_value
from stackex.core.constants import (
    ENVELOPE_BACKOFF,
    ENVELOPE_ERROR_ID,
    ENVELOPE_ERROR_MESSAGE,
    ENVELOPE_ERROR_NAME,
    ENVELOPE_HAS_MORE,
    ENVELOPE_ITEMS,
    ENVELOPE_QUOTA_MAX,
    ENVELOPE_QUOTA_REMAINING,
)
from stackex.core.exceptions import APIError, DecodeError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class APIResponse(Generic[T]):
    """One decoded response envelope.

    Attributes:
        items: Decoded items (empty, never None, on success)
        has_more: Whether another page is available
        quota_remaining: Calls left in the current quota period, if reported
        quota_max: Size of the quota period, if reported
        backoff: Seconds the caller must wait before hitting the route again
        error_id: Set when the server reported an API-level error
        error_name: Symbolic name of the error
        error_message: Human-readable error description
        page, page_size, total, type: Paging fields, present only when the
            request's filter includes them
    """

    items: list[T] = field(default_factory=list)
    has_more: bool = False
    quota_remaining: int | None = None
    quota_max: int | None = None
    backoff: int | None = None
    error_id: int | None = None
    error_name: str | None = None
    error_message: str | None = None
    page: int | None = None
    page_size: int | None = None
    total: int | None = None
    type: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error_id is not None

    @property
    def has_quota(self) -> bool:
        return self.quota_remaining is not None and self.quota_max is not None

    def to_error(self, route: str | None = None, status_code: int | None = None) -> APIError:
        """Build the ``APIError`` this envelope signals."""
        return APIError(
            error_id=self.error_id if self.error_id is not None else 0,
            error_name=self.error_name,
            error_message=self.error_message,
            status_code=status_code,
            route=route,
            backoff=self.backoff,
            quota_remaining=self.quota_remaining,
            quota_max=self.quota_max,
        )

    def to_dataframe(self) -> pd.DataFrame:
        """Items as a DataFrame, one row per item, columns from the encoded fields."""
        rows = [encode_value(item) for item in self.items]
        if not rows:
            return pd.DataFrame()
        return pd.json_normalize(rows)


def _optional_int(body: dict[str, Any], key: str, route: str | None) -> int | None:
    value = body.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError("Expected an integer", route=route, field=key, details=repr(value))
    return value


def _optional_str(body: dict[str, Any], key: str, route: str | None) -> str | None:
    value = body.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise DecodeError("Expected a string", route=route, field=key, details=repr(value))
    return value


def parse_body(raw_body: bytes | str, route: str | None = None) -> dict[str, Any]:
    """Parse a response body into the top-level JSON object."""
    if not raw_body:
        raise DecodeError("Empty response body", route=route)
    try:
        body = json.loads(raw_body)
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError("Response body is not valid JSON", route=route, details=str(e), original_error=e) from e
    if not isinstance(body, dict):
        raise DecodeError("Response body is not a JSON object", route=route, details=type(body).__name__)
    return body


def decode_envelope(
    raw_body: bytes | str,
    item_type: type[T] | None = None,
    route: str | None = None,
) -> APIResponse[T]:
    """Decode a raw response body into an ``APIResponse``.

    Quota fields are required on a success envelope that carries ``items``.
    A body without ``items`` (a bare backoff notice, ``{}``) decodes to an
    empty envelope that leaves quota unreported. Reporting only one of the
    two quota fields is always malformed.

    Raises:
        DecodeError: If the body is not a well-formed envelope
    """
    body = parse_body(raw_body, route)

    quota_remaining = _optional_int(body, ENVELOPE_QUOTA_REMAINING, route)
    quota_max = _optional_int(body, ENVELOPE_QUOTA_MAX, route)
    if (quota_remaining is None) != (quota_max is None):
        missing = ENVELOPE_QUOTA_REMAINING if quota_remaining is None else ENVELOPE_QUOTA_MAX
        raise DecodeError("Incomplete quota fields", route=route, field=missing)

    envelope: APIResponse[T] = APIResponse(
        quota_remaining=quota_remaining,
        quota_max=quota_max,
        backoff=_optional_int(body, ENVELOPE_BACKOFF, route),
        error_id=_optional_int(body, ENVELOPE_ERROR_ID, route),
        error_name=_optional_str(body, ENVELOPE_ERROR_NAME, route),
        error_message=_optional_str(body, ENVELOPE_ERROR_MESSAGE, route),
        page=_optional_int(body, "page", route),
        page_size=_optional_int(body, "page_size", route),
        total=_optional_int(body, "total", route),
        type=_optional_str(body, "type", route),
    )

    if envelope.is_error:
        return envelope

    has_more = body.get(ENVELOPE_HAS_MORE, False)
    if not isinstance(has_more, bool):
        raise DecodeError("Expected a boolean", route=route, field=ENVELOPE_HAS_MORE, details=repr(has_more))
    envelope.has_more = has_more

    raw_items = body.get(ENVELOPE_ITEMS)
    if raw_items is None:
        return envelope
    if not isinstance(raw_items, list):
        raise DecodeError("Expected a JSON array", route=route, field=ENVELOPE_ITEMS)
    if not envelope.has_quota:
        raise DecodeError("Missing quota fields", route=route, field=ENVELOPE_QUOTA_REMAINING)

    try:
        envelope.items = decode_items(raw_items, item_type)
    except DecodeError as e:
        e.route = e.route or route
        raise
    except (TypeError, ValueError) as e:
        raise DecodeError("Item could not be decoded", route=route, field=ENVELOPE_ITEMS, details=str(e)) from e
    return envelope
