"""Transport middleware and the error normalizer.

- **SecurityHeadersMiddleware**: Adds security headers (X-Frame-Options, etc.)
- **RequestContextMiddleware**: Manages correlation and request IDs
- **RequestLoggingMiddleware**: Structured request logging with timing
- **error_handler**: Normalizes and reports every failure

Transport middleware wraps every request, matched or not. Route-level
middleware declared with ``@middleware`` lives in ``src.api.routing`` and only
runs for the routes it is attached to.
"""
