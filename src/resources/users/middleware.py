"""Route middleware used by the users resource."""

from src.api.routing import ApiRequest, ApiResponse, Middleware


def example(header_value: str) -> Middleware:
    """Build a middleware that tags the response with ``ExampleHeader``."""

    async def set_example_header(request: ApiRequest, response: ApiResponse) -> None:
        _ = request
        response.set_header("ExampleHeader", header_value)

    return set_example_header
