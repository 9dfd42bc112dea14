"""Core infrastructure package for shared application functionality.

This package provides the foundational components used across all layers
of the Routekit application:

- **config**: Centralized configuration management with environment support
- **context**: Request context and correlation ID management
- **exceptions**: HTTP error taxonomy, one class per status
- **error_context**: Sensitive data sanitization for safe logging
- **logging**: Structured logging with loguru
- **observability**: Distributed tracing with OpenTelemetry
- **types**: Type aliases for better code clarity
"""
