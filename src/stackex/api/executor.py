"""Execution of one logical API call.

Each call walks the same sequence::

    CheckBackoff -> (Blocked | Proceed) -> Send -> Decode -> UpdateState -> (Success | failure)

Quota and backoff fields are applied from every envelope that decodes,
including error envelopes; nothing is applied from a body that fails to
decode. The only automatic delay is the wait under ``BackoffBehavior.WAIT``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar
from urllib.parse import quote, urlencode

from stackex.api.errors import ErrorMessageHelper
from stackex.api.ledger import BackoffLedger, QuotaState
from stackex.api.transport import HTTPExecutor, HTTPResult, Waiter
from stackex.codec.envelope import APIResponse, decode_envelope
from stackex.codec.values import encode_value
from stackex.core.config import BackoffBehavior, ClientConfig
from stackex.core.constants import LOW_QUOTA_THRESHOLD, ROUTE_ID_SEPARATOR
from stackex.core.exceptions import BackoffError, TransportError
from stackex.core.logging import redact_message, with_log_context

logger = logging.getLogger(__name__)

T = TypeVar("T")


def merge_parameters(defaults: Mapping[str, Any], overrides: Mapping[str, Any] | None) -> dict[str, Any]:
    """Defaults overridden by caller values on every key collision."""
    merged = dict(defaults)
    if overrides:
        merged.update(overrides)
    return merged


def render_parameter(value: Any) -> str:
    """Query-string text of a parameter value (dates become epoch seconds)."""
    encoded = encode_value(value)
    if encoded is None:
        return ""
    if isinstance(encoded, bool):
        return "true" if encoded else "false"
    if isinstance(encoded, list):
        return ROUTE_ID_SEPARATOR.join(render_parameter(item) for item in encoded)
    return str(encoded)


class RequestExecutor:
    """Runs API calls against shared backoff and quota state.

    Args:
        config: Static client configuration (base URL, default parameters)
        http_executor: Performs the HTTP exchange
        waiter: Blocks until a backoff expires
        ledger: Per-route backoff expirations
        quota: Quota counters updated from every envelope
        max_backoff_wait: Longest a WAIT-policy call may block (None = unbounded)
    """

    def __init__(
        self,
        config: ClientConfig,
        http_executor: HTTPExecutor,
        waiter: Waiter,
        ledger: BackoffLedger,
        quota: QuotaState,
        max_backoff_wait: float | None = None,
    ):
        self.config = config
        self.http_executor = http_executor
        self.waiter = waiter
        self.ledger = ledger
        self.quota = quota
        self.max_backoff_wait = max_backoff_wait

    # ==================== REQUEST BUILDING ====================

    def build_parameters(self, parameters: Mapping[str, Any] | None = None) -> dict[str, str]:
        """Merged, rendered parameters; empty values are dropped."""
        merged = merge_parameters(self.config.base_parameters(), parameters)
        rendered = {key: render_parameter(value) for key, value in merged.items()}
        return {key: value for key, value in rendered.items() if value != ""}

    def build_url(self, route: str, parameters: Mapping[str, Any] | None = None) -> str:
        query = urlencode(sorted(self.build_parameters(parameters).items()), quote_via=quote, safe=";")
        url = f"{self.config.base_url}/{self.config.api_version}/{route.strip('/')}"
        return f"{url}?{query}" if query else url

    def build_headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Accept-Encoding": "gzip",
            "User-Agent": self.config.user_agent,
        }

    # ==================== CALL STATES ====================

    def check_backoff(self, route: str, behavior: BackoffBehavior, log: logging.LoggerAdapter) -> None:
        """Apply ``behavior`` if ``route`` is currently backed off.

        Raises:
            BackoffError: Under THROW_ERROR, when the wait would exceed
                ``max_backoff_wait``, or when the wait is interrupted
        """
        self.ledger.prune()
        expiration = self.ledger.peek(route)
        if expiration is None:
            return

        remaining = max(0.0, expiration - self.ledger.now())
        if behavior is BackoffBehavior.THROW_ERROR:
            log.info(f"Route {route} is backed off for {remaining:.1f}s more; not sending")
            raise BackoffError(route, expiration, remaining)

        if behavior is BackoffBehavior.IGNORE:
            log.debug(f"Ignoring active backoff on {route} ({remaining:.1f}s left)")
            return

        # Another call may record a newer backoff on this route while we wait
        while expiration is not None:
            remaining = max(0.0, expiration - self.ledger.now())
            if self.max_backoff_wait is not None and remaining > self.max_backoff_wait:
                raise BackoffError(
                    route,
                    expiration,
                    remaining,
                    message=f"Backoff on '{route}' exceeds the maximum wait of {self.max_backoff_wait:.0f}s",
                )

            log.info(f"Waiting {remaining:.1f}s for backoff on {route} to expire")
            if not self.waiter.wait_until(expiration):
                raise BackoffError(
                    route, expiration, max(0.0, expiration - self.ledger.now()), message="Backoff wait interrupted"
                )
            if self.ledger.consume(route, expected=expiration):
                return
            expiration = self.ledger.peek(route)

    def send(self, route: str, parameters: Mapping[str, Any] | None, log: logging.LoggerAdapter) -> tuple[str, HTTPResult]:
        url = self.build_url(route, parameters)
        log.debug(f"GET {redact_message(url)}")
        result = self.http_executor.execute("GET", url, self.build_headers())
        if not result.body:
            if result.error is not None:
                log.error("\n" + ErrorMessageHelper.get_network_error_message(result.error, route))
                raise TransportError(
                    "Request failed", url=redact_message(url), details=str(result.error), original_error=result.error
                )
            if not result.ok:
                raise TransportError("Response had no body", status_code=result.status, url=redact_message(url))
        return url, result

    def update_state(self, route: str, envelope: APIResponse[Any], log: logging.LoggerAdapter) -> None:
        if envelope.has_quota:
            self.quota.update(envelope.quota_remaining, envelope.quota_max)
            if envelope.quota_remaining <= LOW_QUOTA_THRESHOLD:
                log.warning(f"Quota nearly exhausted: {envelope.quota_remaining}/{envelope.quota_max} remaining")
        if envelope.backoff is not None and envelope.backoff > 0:
            self.ledger.record(route, envelope.backoff)

    # ==================== ENTRY POINT ====================

    def execute(
        self,
        route: str,
        item_type: type[T] | None = None,
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
    ) -> APIResponse[T]:
        """
        Perform one API call and return its decoded envelope.

        Args:
            route: Resource path, e.g. "questions/1;2;3"
            item_type: Class the envelope items decode into (None keeps mappings)
            parameters: Caller parameters; they win over client defaults
            backoff_behavior: What to do if ``route`` is backed off

        Returns:
            The decoded envelope

        Raises:
            BackoffError: Route restricted and the policy forbids sending
            TransportError: Network failure, or non-2xx without an error envelope
            DecodeError: Body is not a well-formed envelope (state untouched)
            APIError: Server returned an error envelope (state already applied)
        """
        log = with_log_context(logger, route=route)

        self.check_backoff(route, backoff_behavior, log)
        url, result = self.send(route, parameters, log)
        envelope = decode_envelope(result.body or b"", item_type, route=route)
        self.update_state(route, envelope, log)

        if envelope.is_error:
            log.error(
                "\n"
                + ErrorMessageHelper.get_api_error_message(
                    envelope.error_id, envelope.error_name, route, envelope.error_message
                )
            )
            raise envelope.to_error(route=route, status_code=result.status)

        if result.error is not None or not result.ok:
            raise TransportError(
                "Request failed",
                status_code=result.status,
                url=redact_message(url),
                details=str(result.error) if result.error else None,
                original_error=result.error,
            )

        log.debug(f"{route}: {len(envelope.items)} item(s), has_more={envelope.has_more}")
        return envelope
