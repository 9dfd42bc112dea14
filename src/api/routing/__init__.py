"""Declarative routing: route composition, registration and dispatch.

- **builder**: immutable route builder and the ``@get``/``@post``/... decorators
- **registry**: the frozen-after-startup table of route definitions
- **dispatcher**: runs guard, middleware and controller for each request
- **guard**: HS256 bearer token verification
- **validation**: pydantic-backed request body validation middleware
- **controller** / **context**: what route handlers see of a request
"""

from src.api.routing.context import ApiRequest, ApiResponse, Middleware
from src.api.routing.controller import Controller
from src.api.routing.dispatcher import RequestDispatcher
from src.api.routing.errors import (
    DuplicateRouteError,
    RegistryFrozenError,
    RouteDefinitionError,
    RoutingError,
)
from src.api.routing.registry import RouteRegistry

# Imported last: loading the ``guard`` submodule above rebinds the package
# attribute ``guard``; this restores it to the builder decorator.
from src.api.routing.builder import (
    RouteBuilder,
    RouteDefinition,
    definition_of,
    delete,
    get,
    guard,
    middleware,
    patch,
    post,
    put,
    response,
    route,
    validate,
)

__all__ = [
    "ApiRequest",
    "ApiResponse",
    "Controller",
    "DuplicateRouteError",
    "Middleware",
    "RegistryFrozenError",
    "RequestDispatcher",
    "RouteBuilder",
    "RouteDefinition",
    "RouteDefinitionError",
    "RouteRegistry",
    "RoutingError",
    "definition_of",
    "delete",
    "get",
    "guard",
    "middleware",
    "patch",
    "post",
    "put",
    "response",
    "route",
    "validate",
]
