"""Human-readable explanations for API and transport failures."""

from stackex.core.constants import API_ERROR_NAMES, BANNER_WIDTH


class ErrorMessageHelper:
    """Provides contextual error messages with actionable suggestions."""

    DOCS_URL = "https://api.stackexchange.com/docs/error-handling"
    THROTTLE_URL = "https://api.stackexchange.com/docs/throttle"

    API_ERRORS: dict[int, dict[str, object]] = {
        400: {
            "title": "Bad Parameter",
            "reason": "An invalid parameter was passed, this includes even high level parameters like key or site",
            "suggestions": [
                "Check the parameter named in the error message",
                "Verify the site parameter names an existing site (see /sites)",
                "Make sure IDs in the route are numeric and ';'-separated",
            ],
        },
        401: {
            "title": "Access Token Required",
            "reason": "A method that requires an access token was called without one",
            "suggestions": [
                "Set STACKEX_ACCESS_TOKEN or pass access_token in ClientConfig",
            ],
        },
        402: {
            "title": "Invalid Access Token",
            "reason": "The access token passed is malformed or has been revoked",
            "suggestions": [
                "Re-run the OAuth flow to obtain a fresh access token",
            ],
        },
        403: {
            "title": "Access Denied",
            "reason": "The access token does not carry the scope this method needs",
            "suggestions": [
                "Request the missing scope when authorizing the application",
            ],
        },
        404: {
            "title": "No Method",
            "reason": "The route does not name an existing API method",
            "suggestions": [
                "Check the route for typos",
                "Verify the API version in the base URL",
            ],
        },
        405: {
            "title": "Key Required",
            "reason": "A method that requires an application key was called without one",
            "suggestions": [
                "Set STACKEX_API_KEY or pass api_key in ClientConfig",
            ],
        },
        406: {
            "title": "Access Token Compromised",
            "reason": "The access token was sent over an insecure connection and has been invalidated",
            "suggestions": [
                "Always use an https base URL",
                "Obtain a new access token",
            ],
        },
        407: {
            "title": "Write Failed",
            "reason": "A write operation was rejected by the server",
            "suggestions": [
                "Read error_message for the specific reason",
            ],
        },
        409: {
            "title": "Duplicate Request",
            "reason": "The same request was issued again before the first one completed",
            "suggestions": [
                "Avoid issuing identical requests concurrently",
            ],
        },
        500: {
            "title": "Internal Error",
            "reason": "The API encountered an unexpected failure",
            "suggestions": [
                "This is typically a temporary issue - retry in a few minutes",
            ],
        },
        502: {
            "title": "Throttle Violation",
            "reason": "The application is violating a throttle or has exhausted its quota",
            "suggestions": [
                "Honour backoff fields (use BackoffBehavior.WAIT)",
                "Register an application key to raise the daily quota",
                "Batch up to 100 IDs per request instead of one call per ID",
                f"See throttling rules: {THROTTLE_URL}",
            ],
        },
        503: {
            "title": "Temporarily Unavailable",
            "reason": "The API is unavailable, usually during maintenance",
            "suggestions": [
                "Wait a few minutes and retry",
            ],
        },
    }

    @staticmethod
    def _render(title: str, context: list[str], reason: str, suggestions: list[str], footer: str) -> str:
        output = [f"{'=' * BANNER_WIDTH}", title, f"{'=' * BANNER_WIDTH}", *context]
        output.extend(["", "Why this happened:", f"  {reason}", "", "How to fix it:"])
        for i, suggestion in enumerate(suggestions, 1):
            output.append(f"  {i}. {suggestion}")
        output.extend(["", f"For more help: {footer}"])
        return "\n".join(output)

    @staticmethod
    def get_api_error_message(
        error_id: int, error_name: str | None = None, route: str | None = None, error_message: str | None = None
    ) -> str:
        """Get detailed error message with suggestions for an API error id."""
        error_info = ErrorMessageHelper.API_ERRORS.get(
            error_id,
            {
                "title": f"API Error {error_id}",
                "reason": "The API reported an error this client does not know",
                "suggestions": ["Read error_message for details", "Review logs for the failing request"],
            },
        )
        name = error_name or API_ERROR_NAMES.get(error_id, "unknown")
        context = [f"Route: {route or 'unknown'}", f"Error: {error_id} ({name})"]
        if error_message:
            context.append(f"Server message: {error_message}")
        return ErrorMessageHelper._render(
            f"API Error {error_id}: {error_info['title']}",
            context,
            str(error_info["reason"]),
            list(error_info["suggestions"]),
            ErrorMessageHelper.DOCS_URL,
        )

    @staticmethod
    def get_network_error_message(error: Exception, route: str | None = None) -> str:
        """Get detailed message for network-related errors."""
        error_type = type(error).__name__

        messages = {
            "ConnectionError": {
                "reason": "Cannot establish connection to the API servers",
                "suggestions": [
                    "Check your internet connection",
                    "Check if you're behind a corporate firewall or proxy",
                    "Verify DNS resolves the API host",
                ],
            },
            "Timeout": {
                "reason": "The request took too long and timed out",
                "suggestions": [
                    "Your network connection may be slow or unstable",
                    "Increase the timeout with STACKEX_TIMEOUT",
                ],
            },
            "SSLError": {
                "reason": "SSL/TLS certificate verification failed",
                "suggestions": [
                    "Update certificates: pip install --upgrade certifi",
                    "Check system date/time is correct",
                ],
            },
        }
        if error_type in ("ReadTimeout", "ConnectTimeout", "TimeoutError"):
            error_type = "Timeout"

        error_info = messages.get(
            error_type,
            {
                "reason": "A network error occurred",
                "suggestions": ["Check your internet connection", "Try again in a few moments"],
            },
        )
        return ErrorMessageHelper._render(
            f"Network Error: {type(error).__name__}",
            [f"Route: {route or 'unknown'}", f"Error details: {error!s}"],
            error_info["reason"],
            error_info["suggestions"],
            ErrorMessageHelper.DOCS_URL,
        )
