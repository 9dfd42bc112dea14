"""Base class for route handlers."""

from typing import Any

from src.api.routing.context import ApiRequest, ApiResponse


class Controller:
    """Request handler instantiated fresh for every request.

    Subclasses implement ``handle`` and are bound to a route with the
    decorators from ``src.api.routing.builder``. The value returned by
    ``handle`` becomes the response body.

    ``status_code`` starts as the status declared with ``@response`` (200 by
    default). A handler may change it at runtime for a single request; error
    responses are produced by raising ``ApiError`` subclasses instead.
    """

    def __init__(
        self, request: ApiRequest, response: ApiResponse, status_code: int = 200
    ) -> None:
        self.request = request
        self.response = response
        self.status_code = status_code

    async def handle(self) -> Any:
        """Process the request and return the response body."""
        raise NotImplementedError
