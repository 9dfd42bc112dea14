"""Routekit - declarative HTTP routing on FastAPI.

Routekit serves a static list of controllers. Each controller declares its
method, path, status, guard, body schema and middleware with decorators, and
all failures surface to clients in a single JSON error shape.

Architecture Overview:
- **API Layer**: FastAPI application, transport middleware and the routing
  package (builder, registry, dispatcher, guard, validation)
- **Core Layer**: Configuration, error taxonomy, logging and tracing
- **Resources**: Application controllers and their schemas and middleware
"""
