"""Constants and default values for stackex.

This module centralizes the API host, default parameters, envelope field
names and the documented error ids used throughout the client.
"""

# ==================== API DEFAULTS ====================

DEFAULT_BASE_URL: str = "https://api.stackexchange.com"
DEFAULT_API_VERSION: str = "2.2"
DEFAULT_SITE: str = "stackoverflow"
DEFAULT_FILTER: str = "default"
DEFAULT_TIMEOUT: float = 30.0  # Seconds per HTTP request
DEFAULT_USER_AGENT: str = "stackex (python)"

# Separator used to join entity IDs inside a route ("questions/1;2;3")
ROUTE_ID_SEPARATOR: str = ";"

# ==================== DISPATCH DEFAULTS ====================

DEFAULT_DISPATCH_WORKERS: int = 4  # Background threads for async calls
MAX_DISPATCH_WORKERS: int = 64
DEFAULT_MAX_BACKOFF_WAIT: float = 300.0  # Longest wait-policy block in seconds

# Remaining quota at or below which a warning is logged
LOW_QUOTA_THRESHOLD: int = 10

# ==================== LOGGING DEFAULTS ====================

LOG_FILE_MAX_BYTES: int = 10 * 1024 * 1024  # 10MB max per log file
LOG_FILE_BACKUP_COUNT: int = 5  # Number of backup log files to keep

# Width of banner separator lines in rendered error messages
BANNER_WIDTH: int = 60

# ==================== ENVELOPE FIELDS ====================

ENVELOPE_ITEMS: str = "items"
ENVELOPE_HAS_MORE: str = "has_more"
ENVELOPE_QUOTA_REMAINING: str = "quota_remaining"
ENVELOPE_QUOTA_MAX: str = "quota_max"
ENVELOPE_BACKOFF: str = "backoff"
ENVELOPE_ERROR_ID: str = "error_id"
ENVELOPE_ERROR_NAME: str = "error_name"
ENVELOPE_ERROR_MESSAGE: str = "error_message"

# ==================== ENVIRONMENT VARIABLE MAPPING ====================

# Maps ClientConfig field names to environment variable names
ENV_VAR_MAPPING: dict[str, str] = {
    "default_site": "STACKEX_SITE",
    "default_filter": "STACKEX_FILTER",
    "api_key": "STACKEX_API_KEY",
    "access_token": "STACKEX_ACCESS_TOKEN",
    "base_url": "STACKEX_BASE_URL",
    "api_version": "STACKEX_API_VERSION",
    "timeout": "STACKEX_TIMEOUT",
}

# ==================== API ERROR IDS ====================

# Documented error ids returned in the error envelope
API_ERROR_NAMES: dict[int, str] = {
    400: "bad_parameter",
    401: "access_token_required",
    402: "invalid_access_token",
    403: "access_denied",
    404: "no_method",
    405: "key_required",
    406: "access_token_compromised",
    407: "write_failed",
    409: "duplicate_request",
    500: "internal_error",
    502: "throttle_violation",
    503: "temporarily_unavailable",
}
