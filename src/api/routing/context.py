"""Transport-agnostic request and response contexts handed to controllers.

Both objects are created fresh by the dispatcher for every request and
discarded when the response is written. Controllers and route middleware only
ever see these objects, never the Starlette request itself.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import orjson
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from src.api.constants import FORM_CONTENT_TYPES, JSON_CONTENT_TYPES
from src.api.utils.responses import ORJSONResponse
from src.core.exceptions import BadRequest

if TYPE_CHECKING:
    from pydantic import BaseModel

    from src.api.routing.builder import RouteDefinition
    from src.core.types import Claims


@dataclass(slots=True)
class ApiRequest:
    """Everything a controller may read about the incoming request."""

    body: Any
    params: dict[str, Any]
    query: dict[str, str]
    headers: dict[str, str]
    cookies: dict[str, str]
    ip: str | None
    method: str
    path: str
    url: str
    base_url: str
    route: RouteDefinition | None = None
    auth: Claims | None = None
    validated: BaseModel | None = None

    def get_header(self, name: str) -> str | None:
        """Return a request header by case-insensitive name."""
        return self.headers.get(name.lower())

    @classmethod
    async def from_request(
        cls, request: Request, route: RouteDefinition | None = None
    ) -> ApiRequest:
        """Build the context from a Starlette request, parsing its body."""
        query = request.url.query
        return cls(
            body=await read_body(request),
            params=dict(request.path_params),
            query=dict(request.query_params),
            headers={k.lower(): v for k, v in request.headers.items()},
            cookies=dict(request.cookies),
            ip=request.client.host if request.client else None,
            method=request.method,
            path=request.url.path,
            url=f"{request.url.path}?{query}" if query else request.url.path,
            base_url=str(request.base_url).rstrip("/"),
            route=route,
        )


async def read_body(request: Request) -> Any:
    """Parse the request body according to its content type.

    Returns:
        Any: Decoded JSON, a dict for form submissions, text for anything
            else, or None when the body is empty.

    Raises:
        BadRequest: If a JSON body cannot be decoded.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip()

    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        return dict(form)

    raw = await request.body()
    if not raw:
        return None

    if content_type in JSON_CONTENT_TYPES or content_type.endswith("+json"):
        try:
            return orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise BadRequest("Malformed JSON body", cause=e) from e

    return raw.decode("utf-8", errors="replace")


@dataclass(slots=True)
class ApiResponse:
    """Response-side capabilities exposed to controllers and middleware.

    Headers and cookies are collected here and applied to whichever response
    is finally written, including error responses. ``send`` and ``redirect``
    complete the response; the dispatcher stops the chain as soon as either
    is called.
    """

    locals: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    _cookies: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    _completed: Response | None = None

    @property
    def completed(self) -> bool:
        """Whether ``send`` or ``redirect`` has already produced a response."""
        return self._completed is not None

    @property
    def completed_response(self) -> Response | None:
        """The response produced by ``send`` or ``redirect``, if any."""
        return self._completed

    def set_header(self, name: str, value: str) -> None:
        """Set a response header."""
        self.headers[name] = value

    def set_cookie(self, key: str, value: str = "", **options: Any) -> None:
        """Set a cookie; options match ``starlette.responses.Response.set_cookie``."""
        self._cookies.append(("set", {"key": key, "value": value, **options}))

    def clear_cookie(self, key: str, **options: Any) -> None:
        """Expire a cookie on the client."""
        self._cookies.append(("delete", {"key": key, **options}))

    def redirect(self, url: str, status_code: int = 302) -> None:
        """Complete the response with a redirect."""
        self._completed = RedirectResponse(url, status_code=status_code)

    def send(self, content: Any = None, status_code: int = 200) -> None:
        """Complete the response with ``content`` serialized as JSON."""
        self._completed = render(content, status_code)

    def apply(self, response: Response) -> Response:
        """Copy collected headers and cookies onto ``response``."""
        for name, value in self.headers.items():
            response.headers[name] = value
        for action, options in self._cookies:
            if action == "set":
                response.set_cookie(**options)
            else:
                response.delete_cookie(**options)
        return response


def render(content: Any, status_code: int) -> Response:
    """Serialize a controller result into a transport response."""
    if isinstance(content, Response):
        return content
    if content is None:
        return Response(status_code=status_code)
    return ORJSONResponse(content=content, status_code=status_code)


# Route-level middleware: receives the request and response contexts and
# either returns normally, raises, or completes the response itself.
type Middleware = Callable[[ApiRequest, ApiResponse], Awaitable[None] | None]
