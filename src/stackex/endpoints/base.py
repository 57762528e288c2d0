"""Shared helpers for the convenience endpoints."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from concurrent.futures import Future
from typing import Any, Protocol

from stackex.codec.envelope import APIResponse
from stackex.core.config import BackoffBehavior
from stackex.core.constants import ROUTE_ID_SEPARATOR


def build_route(resource: str, ids: Iterable[int] | None = None, suffix: str | None = None) -> str:
    """Route for ``resource`` with ``;``-joined IDs and an optional sub-resource.

    Example:
        build_route("questions", [1, 2], "comments")  # "questions/1;2/comments"
    """
    route = resource.strip("/")
    if ids is not None:
        route = f"{route}/{ROUTE_ID_SEPARATOR.join(str(i) for i in ids)}"
    if suffix:
        route = f"{route}/{suffix.strip('/')}"
    return route


def require_ids(ids: Iterable[int]) -> list[int]:
    """Materialize ``ids``.

    Raises:
        ValueError: If no IDs were given
    """
    ids = list(ids)
    if not ids:
        raise ValueError("ids is empty")
    return ids


class SupportsAPIRequest(Protocol):
    """What the endpoint mixins need from the class they are mixed into."""

    def perform_api_request(
        self,
        route: str,
        item_type: Any = None,
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
    ) -> APIResponse[Any]: ...

    def perform_api_request_async(
        self,
        route: str,
        item_type: Any = None,
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
        callback: Any = None,
    ) -> Future: ...

    def fail_async(self, route: str, error: Exception, callback: Any = None) -> Future: ...
