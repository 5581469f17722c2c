"""API-related constants."""

# HTTP headers
CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"

# Request handling
MAX_USER_AGENT_LENGTH = 200
UNKNOWN_CLIENT = "unknown"

# Security
DEFAULT_HSTS_MAX_AGE = 31536000  # 1 year in seconds
