"""The table of route definitions served by the application.

A registry is created once per application by ``create_app``, filled from the
static ``ROUTES`` list, then frozen and bound to the transport before uvicorn
accepts connections. After that it is only read, so request tasks share it
without locking.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from loguru import logger

from src.api.routing.builder import RouteDefinition, definition_of, normalize_path
from src.api.routing.errors import DuplicateRouteError, RegistryFrozenError

if TYPE_CHECKING:
    from fastapi import FastAPI

    from src.api.routing.controller import Controller
    from src.api.routing.dispatcher import RequestDispatcher


class RouteRegistry:
    """Mapping of ``(METHOD, path)`` to ``RouteDefinition``.

    Duplicate registrations are rejected: two controllers claiming the same
    method and path is a startup-time error rather than a silent override.
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], RouteDefinition] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        """Whether registration is closed."""
        return self._frozen

    def register(self, definition: RouteDefinition) -> None:
        """Add a definition to the table.

        Raises:
            RegistryFrozenError: If the registry has been frozen.
            DuplicateRouteError: If the method and path are already taken.
        """
        if self._frozen:
            msg = (
                f"Cannot register {definition.method} {definition.path}: "
                "registry is frozen"
            )
            raise RegistryFrozenError(msg)
        if definition.key in self._routes:
            raise DuplicateRouteError(definition.method, definition.path)
        self._routes[definition.key] = definition

    def include(self, controllers: Iterable[type[Controller]]) -> None:
        """Register the definition attached to each controller."""
        for controller in controllers:
            self.register(definition_of(controller))

    def lookup(self, method: str, path: str) -> RouteDefinition | None:
        """Return the definition registered for ``method`` and ``path``."""
        return self._routes.get((method.upper(), normalize_path(path)))

    def freeze(self) -> None:
        """Close registration. Idempotent."""
        self._frozen = True

    def bind(
        self, app: FastAPI, dispatcher: RequestDispatcher, prefix: str = ""
    ) -> None:
        """Freeze the registry and attach one transport route per definition.

        Path matching, including parameters such as ``{id}``, is left to the
        transport's router.

        Args:
            app: The application receiving the routes.
            dispatcher: Builds the endpoint executing each definition.
            prefix: Path prefix prepended to every route.
        """
        self.freeze()
        for definition in self:
            handler = definition.handler
            app.add_route(
                f"{prefix}{definition.path}",
                dispatcher.endpoint(definition),
                methods=[definition.method],
                name=f"{handler.__module__}.{handler.__qualname__}",
                include_in_schema=False,
            )
            logger.debug(
                "Route attached: {} {}{}", definition.method, prefix, definition.path
            )
        logger.info("Registered {} routes", len(self))

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[RouteDefinition]:
        return iter(self._routes.values())

    def __contains__(self, key: object) -> bool:
        return key in self._routes
