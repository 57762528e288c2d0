"""Configuration dataclasses for stackex.

These dataclasses centralize all configuration options for type safety
and easy testing. They can be built from environment variables or used
directly in code.
"""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from dotenv import find_dotenv, load_dotenv

from stackex.core.constants import (
    DEFAULT_API_VERSION,
    DEFAULT_BASE_URL,
    DEFAULT_DISPATCH_WORKERS,
    DEFAULT_FILTER,
    DEFAULT_MAX_BACKOFF_WAIT,
    DEFAULT_SITE,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    ENV_VAR_MAPPING,
    LOG_FILE_BACKUP_COUNT,
    LOG_FILE_MAX_BYTES,
    MAX_DISPATCH_WORKERS,
)
from stackex.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class BackoffBehavior(Enum):
    """What a call does when its route is currently backed off."""

    WAIT = "wait"  # Block until the backoff expires, then send
    THROW_ERROR = "throw_error"  # Fail with BackoffError without sending
    IGNORE = "ignore"  # Send anyway and leave the ledger entry in place


def _parse_env_numeric(value: str | None, cast: Callable[[str], Any]) -> Any | None:
    """Parse an environment value, returning None when invalid."""
    if value is None:
        return None
    try:
        parsed = cast(value)
    except (TypeError, ValueError):
        return None
    if isinstance(parsed, float) and not math.isfinite(parsed):
        return None
    return parsed


@dataclass
class ClientConfig:
    """Static client configuration merged into every request.

    Attributes:
        default_site: Site parameter sent when the caller does not pass one
        default_filter: Filter parameter sent when the caller does not pass one
        api_key: Optional application key (raises the daily quota)
        access_token: Optional OAuth access token
        base_url: API host including scheme
        api_version: Version path segment (default: "2.2")
        timeout: Per-request timeout in seconds
        user_agent: User-Agent header value
    """

    default_site: str = DEFAULT_SITE
    default_filter: str = DEFAULT_FILTER
    api_key: str | None = None
    access_token: str | None = None
    base_url: str = DEFAULT_BASE_URL
    api_version: str = DEFAULT_API_VERSION
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ConfigurationError("base_url must not be empty", field="base_url")
        if not self.api_version:
            raise ConfigurationError("api_version must not be empty", field="api_version")
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive", field="timeout", details=str(self.timeout))
        self.base_url = self.base_url.rstrip("/")

    def base_parameters(self) -> dict[str, str]:
        """Parameters every request starts from, before caller overrides."""
        params = {"site": self.default_site, "filter": self.default_filter}
        if self.api_key:
            params["key"] = self.api_key
        if self.access_token:
            params["access_token"] = self.access_token
        return params

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None, load_dotenv_file: bool = True) -> ClientConfig:
        """Build configuration from STACKEX_* environment variables.

        A ``.env`` file in the working directory is loaded first unless
        ``load_dotenv_file`` is False. Invalid numeric values are ignored
        with a warning and the default is kept.
        """
        if load_dotenv_file and env is None:
            dotenv_path = find_dotenv(usecwd=True)
            if dotenv_path and load_dotenv(dotenv_path):
                logger.debug(f".env file loaded from {dotenv_path}")
            else:
                logger.debug(".env file not found")
        source = os.environ if env is None else env

        kwargs: dict[str, Any] = {}
        for field_name, var_name in ENV_VAR_MAPPING.items():
            raw = source.get(var_name)
            if raw is None or not raw.strip():
                continue
            raw = raw.strip()
            if field_name == "timeout":
                parsed = _parse_env_numeric(raw, float)
                if parsed is None or parsed <= 0:
                    logger.warning(f"Ignoring invalid {var_name}={raw!r}; using default {DEFAULT_TIMEOUT}")
                    continue
                kwargs[field_name] = parsed
            else:
                kwargs[field_name] = raw
        return cls(**kwargs)


@dataclass
class DispatchConfig:
    """Configuration for the background dispatch queue.

    Attributes:
        max_workers: Threads executing asynchronous calls (default: 4)
        max_backoff_wait: Longest a wait-policy call may block, in seconds.
            ``None`` removes the bound.
    """

    max_workers: int = DEFAULT_DISPATCH_WORKERS
    max_backoff_wait: float | None = DEFAULT_MAX_BACKOFF_WAIT

    def __post_init__(self) -> None:
        if not 1 <= self.max_workers <= MAX_DISPATCH_WORKERS:
            raise ConfigurationError(
                f"max_workers must be between 1 and {MAX_DISPATCH_WORKERS}",
                field="max_workers",
                details=str(self.max_workers),
            )
        if self.max_backoff_wait is not None and self.max_backoff_wait < 0:
            raise ConfigurationError("max_backoff_wait cannot be negative", field="max_backoff_wait")


@dataclass
class LogConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level string (default: "INFO")
        log_format: "text" or "json"
        file_max_bytes: Maximum size per log file (default: 10MB)
        file_backup_count: Number of backup log files (default: 5)
    """

    level: str = "INFO"
    log_format: str = "text"
    file_max_bytes: int = LOG_FILE_MAX_BYTES
    file_backup_count: int = LOG_FILE_BACKUP_COUNT

