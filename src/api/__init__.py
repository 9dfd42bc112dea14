"""HTTP API layer built on FastAPI.

Key components:
- **main**: Application factory and lifecycle management
- **routing**: Declarative route composition, registration and dispatch
- **middleware**: Cross-cutting concerns for all requests
  - Security headers
  - Request context with correlation ID tracking
  - Request logging with timing
  - Error normalization and reporting
- **schemas**: The error response body
- **utils**: orjson response class
"""
