"""Core application constants."""

# Time constants
MILLISECONDS_PER_SECOND = 1000

# Security and redaction
REDACTED = "[REDACTED]"

# Security headers
DEFAULT_HSTS_MAX_AGE = 31536000  # 1 year in seconds

# HTTP status ranges
MIN_STATUS_CODE = 100
MIN_SERVER_ERROR_STATUS = 500

# Status range accepted when coercing foreign exceptions
MIN_ERROR_STATUS = 300
MAX_ERROR_STATUS = 599
