"""Custom exceptions for stackex.

Every failure the client surfaces derives from ``StackExError`` so callers
can catch the whole family at the API boundary. The four call-level failure
kinds are ``BackoffError``, ``TransportError``, ``DecodeError`` and
``APIError``; ``EncodingError`` is reported by the value codec.
"""


class StackExError(Exception):
    """Base exception for all stackex errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(StackExError):
    """Exception raised for invalid client configuration.

    Examples:
        - Empty default site or API version
        - Non-positive timeout or worker count
    """

    def __init__(self, message: str, field: str | None = None, details: str | None = None):
        self.field = field
        super().__init__(message, details)


class EncodingError(StackExError):
    """Exception raised when a value tree cannot be serialized to JSON text."""

    def __init__(self, message: str, details: str | None = None, original_error: Exception | None = None):
        self.original_error = original_error
        super().__init__(message, details)


class DecodeError(StackExError):
    """Exception raised when a response body is not a well-formed envelope.

    No quota or backoff state is applied from a body that fails to decode.
    """

    def __init__(
        self,
        message: str,
        route: str | None = None,
        field: str | None = None,
        details: str | None = None,
        original_error: Exception | None = None,
    ):
        self.route = route
        self.field = field
        self.original_error = original_error
        super().__init__(message, details)

    def __str__(self) -> str:
        parts = [self.message]
        if self.field:
            parts.append(f"field '{self.field}'")
        if self.route:
            parts.append(f"route {self.route}")
        if self.details:
            parts.append(self.details)
        return " - ".join(parts)


class TransportError(StackExError):
    """Exception raised for network or HTTP-layer failures.

    Wraps the error reported by the HTTP executor (or a non-2xx status that
    carried no API error envelope). Never retried automatically.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
        details: str | None = None,
        original_error: Exception | None = None,
    ):
        self.status_code = status_code
        self.url = url
        self.original_error = original_error
        super().__init__(message, details)

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code:
            parts.append(f"HTTP {self.status_code}")
        if self.details:
            parts.append(self.details)
        return " - ".join(parts)


class BackoffError(StackExError):
    """Exception raised when a route is currently restricted by a backoff.

    Attributes:
        route: The route that is backed off
        expiration: Epoch timestamp after which the route may be called again
        time_until_retry: Seconds remaining when the error was raised
    """

    def __init__(self, route: str, expiration: float, time_until_retry: float = 0.0, message: str | None = None):
        self.route = route
        self.expiration = expiration
        self.time_until_retry = time_until_retry
        super().__init__(
            message or f"Route '{route}' is backed off",
            f"retry in {time_until_retry:.1f}s",
        )


class APIError(StackExError):
    """Exception raised when the server returned a well-formed error envelope.

    Quota and backoff fields carried by the same envelope have already been
    applied to the client state by the time this is raised.
    """

    def __init__(
        self,
        error_id: int,
        error_name: str | None = None,
        error_message: str | None = None,
        status_code: int | None = None,
        route: str | None = None,
        backoff: int | None = None,
        quota_remaining: int | None = None,
        quota_max: int | None = None,
    ):
        self.error_id = error_id
        self.error_name = error_name
        self.error_message = error_message
        self.status_code = status_code
        self.route = route
        self.backoff = backoff
        self.quota_remaining = quota_remaining
        self.quota_max = quota_max
        super().__init__(f"API error {error_id} ({error_name or 'unknown'})", error_message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.route:
            parts.append(f"during {self.route}")
        if self.details:
            parts.append(self.details)
        return " - ".join(parts)
