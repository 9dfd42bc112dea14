"""Unit tests for RequestContextMiddleware."""

from typing import Any

import pytest
from pytest_mock import MockerFixture
from starlette.requests import Request
from starlette.responses import Response

from src.api.constants import CORRELATION_ID_HEADER, REQUEST_ID_HEADER
from src.api.middleware.request_context import RequestContextMiddleware
from src.core.context import RequestContext


@pytest.mark.unit
class TestRequestContextMiddleware:
    """Test correlation and request ID handling."""

    @pytest.mark.timeout(5)
    async def test_incoming_correlation_id_is_kept(
        self, mocker: MockerFixture, make_request: Any
    ) -> None:
        """A caller-supplied correlation ID is propagated."""
        seen: dict[str, str | None] = {}

        async def call_next(request: Request) -> Response:
            _ = request
            seen["correlation_id"] = RequestContext.get_correlation_id()
            return Response(status_code=200)

        middleware = RequestContextMiddleware(mocker.Mock())

        response = await middleware.dispatch(
            make_request(headers={CORRELATION_ID_HEADER: "corr-abc"}), call_next
        )

        assert seen["correlation_id"] == "corr-abc"
        assert response.headers[CORRELATION_ID_HEADER] == "corr-abc"
        assert response.headers[REQUEST_ID_HEADER].startswith("req-")

    @pytest.mark.timeout(5)
    async def test_correlation_id_is_generated(
        self, mocker: MockerFixture, make_request: Any
    ) -> None:
        """A correlation ID is generated when none is supplied."""
        middleware = RequestContextMiddleware(mocker.Mock())
        call_next = mocker.AsyncMock(return_value=Response(status_code=200))

        response = await middleware.dispatch(make_request(), call_next)

        assert len(response.headers[CORRELATION_ID_HEADER]) == 36
