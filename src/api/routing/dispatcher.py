"""Per-request execution of a route definition.

For every request the dispatcher:

1. builds fresh ``ApiRequest`` / ``ApiResponse`` contexts,
2. verifies the bearer token when the route is guarded,
3. runs the route middleware in order, stopping early if one completes the
   response,
4. instantiates the controller and writes its result with the route status.

Any exception raised along the way is handed to the error normalizer, which
is the only place error bodies are produced. Exactly one response leaves the
dispatcher on every path.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from loguru import logger

from src.api.middleware.error_handler import handle_exception
from src.api.routing.context import ApiRequest, ApiResponse, render
from src.api.routing.guard import verify_bearer_token

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

    from src.api.routing.builder import RouteDefinition
    from src.core.config import Settings

type Endpoint = Callable[[Request], Awaitable[Response]]


class RequestDispatcher:
    """Executes guard, middleware and controller for matched requests.

    Args:
        settings: Application settings; the auth configuration is read from
            here for guarded routes.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def endpoint(self, definition: RouteDefinition) -> Endpoint:
        """Return a transport endpoint bound to ``definition``."""

        async def dispatch_route(request: Request) -> Response:
            return await self.dispatch(request, definition)

        dispatch_route.__name__ = definition.handler.__name__
        return dispatch_route

    async def dispatch(
        self, request: Request, definition: RouteDefinition
    ) -> Response:
        """Run one request through ``definition`` and produce its response.

        Args:
            request: The transport request matched to ``definition``.
            definition: The route to execute.

        Returns:
            Response: The success response, the response completed by a
                middleware, or the normalized error response.
        """
        api_response = ApiResponse()
        try:
            response = await self._run(request, definition, api_response)
            return api_response.apply(response)
        except Exception as exc:
            response = handle_exception(request, exc)
        try:
            return api_response.apply(response)
        except Exception as exc:
            # The collected headers or cookies themselves are invalid
            return handle_exception(request, exc)

    async def _run(
        self,
        request: Request,
        definition: RouteDefinition,
        api_response: ApiResponse,
    ) -> Response:
        api_request = await ApiRequest.from_request(request, definition)

        if definition.guard:
            api_request.auth = verify_bearer_token(
                request.headers.get("authorization"), self.settings.auth_config
            )
            request.state.auth = api_request.auth

        for func in definition.middleware:
            result = func(api_request, api_response)
            if inspect.isawaitable(result):
                await result
            if (completed := api_response.completed_response) is not None:
                logger.debug(
                    "Response completed by middleware {}",
                    getattr(func, "__qualname__", repr(func)),
                )
                return completed

        controller = definition.handler(
            api_request, api_response, status_code=definition.status_code
        )
        result = controller.handle()
        if inspect.isawaitable(result):
            result = await result

        if (completed := api_response.completed_response) is not None:
            return completed
        return render(result, controller.status_code)
