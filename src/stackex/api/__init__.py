"""API module - request execution against the Stack Exchange API.

This module provides:
- BackoffLedger / QuotaState: per-route backoff and quota bookkeeping
- RequestsExecutor / SleepWaiter: default HTTP and wait capabilities
- RequestExecutor: the per-call state machine
- Dispatcher: background queue completing calls through callbacks
- ErrorMessageHelper: human-readable API error explanations
- APIClient: the public facade
"""

from stackex.api.client import APIClient
from stackex.api.dispatch import Completion, Dispatcher
from stackex.api.errors import ErrorMessageHelper
from stackex.api.executor import RequestExecutor, merge_parameters, render_parameter
from stackex.api.ledger import BackoffLedger, QuotaSnapshot, QuotaState
from stackex.api.transport import HTTPExecutor, HTTPResult, RequestsExecutor, SleepWaiter, Waiter

__all__ = [
    "APIClient",
    "BackoffLedger",
    "Completion",
    "Dispatcher",
    "ErrorMessageHelper",
    "HTTPExecutor",
    "HTTPResult",
    "QuotaSnapshot",
    "QuotaState",
    "RequestExecutor",
    "RequestsExecutor",
    "SleepWaiter",
    "Waiter",
    "merge_parameters",
    "render_parameter",
]
