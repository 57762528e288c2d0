"""Core module - Foundation components with no internal dependencies.

This module provides the basic building blocks used throughout the client:
- Version information
- Custom exceptions
- Configuration dataclasses
- Constants and defaults
- Logging helpers
"""

from stackex.core.version import __version__

from stackex.core.exceptions import (
    StackExError,
    ConfigurationError,
    EncodingError,
    DecodeError,
    TransportError,
    BackoffError,
    APIError,
)

from stackex.core.config import (
    BackoffBehavior,
    ClientConfig,
    DispatchConfig,
    LogConfig,
)

from stackex.core.logging import (
    JSONFormatter,
    SensitiveDataFilter,
    redact_message,
    setup_logging,
    with_log_context,
)

__all__ = [
    # Version
    '__version__',
    # Exceptions
    'StackExError',
    'ConfigurationError',
    'EncodingError',
    'DecodeError',
    'TransportError',
    'BackoffError',
    'APIError',
    # Config
    'BackoffBehavior',
    'ClientConfig',
    'DispatchConfig',
    'LogConfig',
    # Logging
    'JSONFormatter',
    'SensitiveDataFilter',
    'redact_message',
    'setup_logging',
    'with_log_context',
]
