"""/users/{ids}."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any

from stackex.codec.envelope import APIResponse
from stackex.core.config import BackoffBehavior
from stackex.endpoints.base import SupportsAPIRequest, build_route, require_ids
from stackex.models import User

if TYPE_CHECKING:
    from stackex.api.dispatch import Completion


class UsersMixin:
    """User profile calls."""

    def fetch_users(
        self: SupportsAPIRequest,
        ids: Iterable[int],
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
    ) -> APIResponse[User]:
        """
        Fetch users by ID on the client's default site.

        Raises:
            ValueError: If ``ids`` is empty
        """
        route = build_route("users", require_ids(ids))
        return self.perform_api_request(route, User, parameters, backoff_behavior)

    def fetch_users_async(
        self: SupportsAPIRequest,
        ids: Iterable[int],
        callback: Completion[APIResponse[User]],
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
    ) -> Future:
        """Async form of ``fetch_users``; an empty ``ids`` fails through ``callback``."""
        try:
            route = build_route("users", require_ids(ids))
        except ValueError as e:
            return self.fail_async("users", e, callback)
        return self.perform_api_request_async(route, User, parameters, backoff_behavior, callback=callback)

    def fetch_user(
        self,
        user_id: int,
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
    ) -> APIResponse[User]:
        return self.fetch_users([user_id], parameters, backoff_behavior)

    def fetch_user_async(
        self,
        user_id: int,
        callback: Completion[APIResponse[User]],
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
    ) -> Future:
        return self.fetch_users_async([user_id], callback, parameters, backoff_behavior)
