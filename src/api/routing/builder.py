"""Declarative route composition.

A route is described by an immutable ``RouteBuilder`` value. Every composition
step returns a new builder; the finalizing step turns the accumulated state
into a frozen ``RouteDefinition``. The builder can be used directly or through
the class decorators below:

    @post("/users")
    @guard()
    @response(201)
    @validate(CreateUser)
    @middleware(set_example_header)
    class Create(Controller):
        async def handle(self) -> dict[str, str]: ...

Decorators apply bottom-up and every middleware step prepends, so middleware
runs in the order the decorators are written, top to bottom: the validator
above runs before ``set_example_header``. The guard always runs before any
middleware. The method/path decorator finalizes the route and must be the
outermost decorator; stacking any route decorator above it is an error.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from functools import partial
from typing import TYPE_CHECKING, Final

from src.api.routing.errors import RouteDefinitionError
from src.api.routing.validation import validator
from src.core.constants import MAX_ERROR_STATUS, MIN_STATUS_CODE

if TYPE_CHECKING:
    from pydantic import BaseModel

    from src.api.routing.controller import Controller
    from src.api.routing.context import Middleware

HTTP_METHODS: Final[frozenset[str]] = frozenset(
    {"GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"}
)
BUILDER_ATTR: Final[str] = "__route_builder__"
DEFINITION_ATTR: Final[str] = "__route_definition__"

_COLON_PARAM = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")

type ControllerClass = type[Controller]
type ControllerDecorator = Callable[[ControllerClass], ControllerClass]


def normalize_path(path: str) -> str:
    """Convert ``/users/:id`` style parameters to ``/users/{id}``."""
    path = _COLON_PARAM.sub(r"{\1}", path.strip())
    if not path.startswith("/"):
        path = f"/{path}"
    return path


@dataclass(frozen=True, slots=True)
class RouteDefinition:
    """The finalized description of how one (method, path) pair is handled."""

    method: str
    path: str
    handler: ControllerClass
    guard: bool = False
    middleware: tuple[Middleware, ...] = ()
    status_code: int = 200
    schema: type[BaseModel] | None = None

    @property
    def key(self) -> tuple[str, str]:
        """Registry key for this definition."""
        return (self.method, self.path)


@dataclass(frozen=True, slots=True)
class RouteBuilder:
    """Accumulated route state before the method and path are known."""

    guard: bool = False
    middleware: tuple[Middleware, ...] = ()
    status_code: int = 200
    schema: type[BaseModel] | None = None

    def with_guard(self) -> RouteBuilder:
        """Require a valid bearer token before anything else runs."""
        return replace(self, guard=True)

    def with_response_status(self, status_code: int) -> RouteBuilder:
        """Set the success status. The last call wins."""
        if not MIN_STATUS_CODE <= status_code <= MAX_ERROR_STATUS:
            msg = f"Invalid response status: {status_code}"
            raise RouteDefinitionError(msg)
        return replace(self, status_code=status_code)

    def with_middleware(
        self, funcs: Middleware | Sequence[Middleware]
    ) -> RouteBuilder:
        """Prepend one or more middleware, keeping their relative order."""
        added = tuple(funcs) if isinstance(funcs, Sequence) else (funcs,)
        for func in added:
            if not callable(func):
                msg = f"Middleware must be callable, got {type(func).__name__}"
                raise RouteDefinitionError(msg)
        return replace(self, middleware=(*added, *self.middleware))

    def with_validation(self, schema: type[BaseModel]) -> RouteBuilder:
        """Prepend a middleware validating the request body against ``schema``."""
        return replace(
            self,
            middleware=(validator(schema), *self.middleware),
            schema=schema,
        )

    def with_method_and_path(
        self, method: str, path: str, handler: ControllerClass
    ) -> RouteDefinition:
        """Finalize the accumulated state into a route definition.

        Raises:
            RouteDefinitionError: If the method is not a known HTTP method.
        """
        method = method.upper()
        if method not in HTTP_METHODS:
            msg = f"Unsupported HTTP method: {method}"
            raise RouteDefinitionError(msg)
        return RouteDefinition(
            method=method,
            path=normalize_path(path),
            handler=handler,
            guard=self.guard,
            middleware=self.middleware,
            status_code=self.status_code,
            schema=self.schema,
        )


def _ensure_not_finalized(controller: ControllerClass) -> None:
    if DEFINITION_ATTR in vars(controller):
        msg = (
            f"{controller.__qualname__} is already bound to a route; "
            "the method/path decorator must be the outermost decorator"
        )
        raise RouteDefinitionError(msg)


def builder_of(controller: ControllerClass) -> RouteBuilder:
    """Return the builder accumulated on ``controller`` so far.

    Only the class's own attribute counts, so subclasses of a routed
    controller start from a blank builder.
    """
    return vars(controller).get(BUILDER_ATTR, RouteBuilder())


def _step(transform: Callable[[RouteBuilder], RouteBuilder]) -> ControllerDecorator:
    def decorator(controller: ControllerClass) -> ControllerClass:
        _ensure_not_finalized(controller)
        setattr(controller, BUILDER_ATTR, transform(builder_of(controller)))
        return controller

    return decorator


def guard() -> ControllerDecorator:
    """Protect the route with bearer token authentication."""
    return _step(RouteBuilder.with_guard)


def response(status_code: int = 200) -> ControllerDecorator:
    """Set the status written for successful responses."""
    return _step(lambda builder: builder.with_response_status(status_code))


def middleware(funcs: Middleware | Sequence[Middleware]) -> ControllerDecorator:
    """Attach middleware to the route."""
    return _step(lambda builder: builder.with_middleware(funcs))


def validate(schema: type[BaseModel]) -> ControllerDecorator:
    """Validate the request body against a pydantic model."""
    return _step(lambda builder: builder.with_validation(schema))


def route(method: str, path: str) -> ControllerDecorator:
    """Bind the controller to ``method`` and ``path``.

    Must be applied last (outermost). The resulting definition is attached to
    the controller and picked up when the controller is registered.
    """

    def decorator(controller: ControllerClass) -> ControllerClass:
        _ensure_not_finalized(controller)
        definition = builder_of(controller).with_method_and_path(
            method, path, controller
        )
        setattr(controller, DEFINITION_ATTR, definition)
        return controller

    return decorator


get = partial(route, "GET")
post = partial(route, "POST")
put = partial(route, "PUT")
patch = partial(route, "PATCH")
delete = partial(route, "DELETE")


def definition_of(controller: ControllerClass) -> RouteDefinition:
    """Return the finalized definition attached to ``controller``.

    Raises:
        RouteDefinitionError: If the controller was never bound to a route.
    """
    definition = vars(controller).get(DEFINITION_ATTR)
    if definition is None:
        msg = f"{controller.__qualname__} has no route; apply @get, @post, etc."
        raise RouteDefinitionError(msg)
    return definition
