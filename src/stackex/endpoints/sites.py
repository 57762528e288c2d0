"""/sites."""

from __future__ import annotations

from collections.abc import Mapping
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any

from stackex.codec.envelope import APIResponse
from stackex.core.config import BackoffBehavior
from stackex.endpoints.base import SupportsAPIRequest
from stackex.models import Site

if TYPE_CHECKING:
    from stackex.api.dispatch import Completion


def _network_parameters(parameters: Mapping[str, Any] | None) -> dict[str, Any]:
    # /sites is network-wide; an empty site is dropped from the query
    params = dict(parameters or {})
    params["site"] = ""
    return params


class SitesMixin:
    """Network-wide site listing."""

    def fetch_sites(
        self: SupportsAPIRequest,
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
    ) -> APIResponse[Site]:
        """Fetch every site of the network (paged with ``page``/``pagesize``)."""
        return self.perform_api_request("sites", Site, _network_parameters(parameters), backoff_behavior)

    def fetch_sites_async(
        self: SupportsAPIRequest,
        callback: Completion[APIResponse[Site]],
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
    ) -> Future:
        return self.perform_api_request_async(
            "sites", Site, _network_parameters(parameters), backoff_behavior, callback=callback
        )
