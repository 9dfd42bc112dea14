"""Type aliases for dynamic data structures throughout the application."""

from typing import Any

# Context dictionary for error details attached to reports
type ErrorContext = dict[str, Any]

# Decoded bearer token claims
type Claims = dict[str, Any]
