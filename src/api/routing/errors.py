"""Startup-time routing contract violations.

These are programming errors detected while routes are declared or
registered. They abort startup and never reach a client, so they are plain
exceptions rather than members of the ``ApiError`` taxonomy.
"""


class RoutingError(Exception):
    """Base class for route declaration and registration failures."""


class RouteDefinitionError(RoutingError):
    """A controller's route decorators were applied incorrectly."""


class DuplicateRouteError(RoutingError):
    """Two definitions were registered for the same method and path."""

    def __init__(self, method: str, path: str) -> None:
        self.method = method
        self.path = path
        super().__init__(f"Route {method} {path} is already registered")


class RegistryFrozenError(RoutingError):
    """A route was registered after the registry stopped accepting changes."""
