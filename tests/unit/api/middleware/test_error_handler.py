"""Unit tests for error normalization and reporting.

This module tests:
- Status coercion of foreign exceptions
- Normalization into the error taxonomy
- The ignore list deciding which errors are reported
- Reading settings from the serving application
- Response bodies produced for every error
"""

from types import SimpleNamespace
from typing import Any

import orjson
import pytest
from fastapi.exceptions import RequestValidationError
from pytest_mock import MockerFixture, MockType
from starlette.exceptions import HTTPException

from src.api.middleware.error_handler import (
    build_error_response,
    coerce_status,
    handle_exception,
    http_exception_handler,
    normalize_exception,
    settings_for,
    should_report,
    validation_error_handler,
)
from src.core.config import LogConfig, Settings, get_settings
from src.core.exceptions import (
    ApiError,
    BadRequest,
    Conflict,
    InternalServerError,
    NotFound,
    ServiceUnavailable,
)


class StatusError(Exception):
    """Foreign exception exposing a status-like attribute."""

    def __init__(self, message: str = "", **attributes: Any) -> None:
        super().__init__(message)
        for key, value in attributes.items():
            setattr(self, key, value)


@pytest.fixture
def mock_reporting(mocker: MockerFixture) -> dict[str, MockType]:
    """Patch the logger and span recording of the error handler."""
    return {
        "logger": mocker.patch("src.api.middleware.error_handler.logger"),
        "record_error": mocker.patch("src.api.middleware.error_handler.record_error"),
    }


@pytest.mark.unit
class TestCoerceStatus:
    """Test coerce_status."""

    @pytest.mark.parametrize(
        ("attributes", "expected"),
        [
            ({"status": 404}, 404),
            ({"status_code": 503}, 503),
            ({"code": "409"}, 409),
            ({"status": 301}, 301),
            ({"status": 599}, 599),
            ({"status": 200}, None),
            ({"status": 600}, None),
            ({"code": "ECONNRESET"}, None),
            ({"status": True}, None),
            ({"status": "abc", "status_code": 418}, 418),
            ({}, None),
        ],
    )
    def test_coerce(self, attributes: dict[str, Any], expected: int | None) -> None:
        """Only plausible 3xx-5xx statuses are accepted."""
        assert coerce_status(StatusError(**attributes)) == expected


@pytest.mark.unit
class TestNormalizeException:
    """Test normalize_exception."""

    def test_api_errors_pass_through(self) -> None:
        """Taxonomy errors are returned unchanged."""
        error = Conflict("Already exists")

        assert normalize_exception(error) is error

    def test_unknown_exception_is_internal(self) -> None:
        """Exceptions without a status become a generic 500."""
        original = KeyError("secret internals")

        error = normalize_exception(original)

        assert isinstance(error, InternalServerError)
        assert error.message == "Oops! Something went wrong."
        assert error.cause is original

    def test_status_maps_to_taxonomy_class(self) -> None:
        """Statuses with a dedicated class use it with the original message."""
        original = StatusError("Already exists", status_code=409)

        error = normalize_exception(original)

        assert isinstance(error, Conflict)
        assert error.message == "Already exists"
        assert error.cause is original

    @pytest.mark.parametrize(
        ("status", "error_class", "message"),
        [
            (500, InternalServerError, "Oops! Something went wrong."),
            (503, ServiceUnavailable, "Service Unavailable"),
        ],
    )
    def test_server_error_message_is_hidden(
        self, status: int, error_class: type[ApiError], message: str
    ) -> None:
        """Foreign 5xx errors keep their status but use the default message."""
        original = StatusError("db password=x", status=status)

        error = normalize_exception(original)

        assert isinstance(error, error_class)
        assert error.message == message
        assert "password" not in error.to_dict()["message"]
        assert error.cause is original

    def test_unmapped_server_error_uses_base_default(self) -> None:
        """5xx statuses without a class fall back to the base default message."""
        error = normalize_exception(StatusError("disk full at /var/db", status=507))

        assert error.status == 507
        assert error.message == "Oops! Something went wrong."

    def test_status_without_class_uses_base_error(self) -> None:
        """Other statuses keep their value on a base ApiError."""
        error = normalize_exception(StatusError("Legal hold", status=451))

        assert type(error) is ApiError
        assert error.status == 451
        assert error.name == "UnavailableForLegalReasons"

    def test_empty_message_falls_back_to_default(self) -> None:
        """A foreign exception without a message uses the class default."""
        error = normalize_exception(StatusError(status=404))

        assert error.message == "Not Found"

    def test_http_exception_detail_is_used(self) -> None:
        """Starlette HTTP exceptions contribute their detail."""
        error = normalize_exception(HTTPException(status_code=405))

        assert error.status == 405
        assert error.message == "Method Not Allowed"


@pytest.mark.unit
class TestShouldReport:
    """Test the ignore list."""

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (NotFound(), False),
            (BadRequest(), True),
            (InternalServerError(), True),
        ],
    )
    def test_default_ignore_list(self, error: ApiError, expected: bool) -> None:
        """Expected client errors are not reported."""
        assert should_report(error, Settings()) is expected

    def test_custom_ignore_list(self) -> None:
        """The ignore list is configurable."""
        settings = Settings(log_config=LogConfig(ignored_status_codes=[400]))

        assert should_report(BadRequest(), settings) is False
        assert should_report(NotFound(), settings) is True


@pytest.mark.unit
class TestSettingsFor:
    """Test which settings the normalizer reads."""

    def test_application_settings_are_used(self, make_request: Any) -> None:
        """Settings stored on the serving application win."""
        settings = Settings(log_config=LogConfig(ignored_status_codes=[500]))
        request = make_request()
        request.scope["app"] = SimpleNamespace(state=SimpleNamespace(settings=settings))

        assert settings_for(request) is settings

    def test_falls_back_to_global_settings(self, make_request: Any) -> None:
        """Requests without application settings use get_settings()."""
        request = make_request()
        request.scope["app"] = SimpleNamespace(state=SimpleNamespace())

        assert settings_for(request) is get_settings()

    def test_ignore_list_of_application_settings(
        self, make_request: Any, mock_reporting: dict[str, MockType]
    ) -> None:
        """handle_exception honors the ignore list of the serving application."""
        settings = Settings(log_config=LogConfig(ignored_status_codes=[500]))
        request = make_request()
        request.scope["app"] = SimpleNamespace(state=SimpleNamespace(settings=settings))

        response = handle_exception(request, RuntimeError("boom"))

        assert response.status_code == 500
        mock_reporting["record_error"].assert_not_called()
        mock_reporting["logger"].debug.assert_called_once()


@pytest.mark.unit
class TestHandleException:
    """Test handle_exception end to end."""

    def test_reported_error(
        self, make_request: Any, mock_reporting: dict[str, MockType]
    ) -> None:
        """Reportable errors are logged with sanitized context and recorded."""
        request = make_request(
            path="/users", headers={"Authorization": "Bearer secret-token"}
        )
        original = RuntimeError("boom")

        response = handle_exception(request, original)

        assert response.status_code == 500
        mock_reporting["record_error"].assert_called_once()
        recorded = mock_reporting["record_error"].call_args.args[0]
        assert recorded.cause is original

        opt_call = mock_reporting["logger"].opt.call_args
        assert opt_call.kwargs["exception"] is original
        log_kwargs = mock_reporting["logger"].opt.return_value.error.call_args.kwargs
        assert log_kwargs["status"] == 500
        assert log_kwargs["request_path"] == "/users"
        assert log_kwargs["headers"]["authorization"] == "[REDACTED]"

    def test_ignored_error_is_not_reported(
        self, make_request: Any, mock_reporting: dict[str, MockType]
    ) -> None:
        """Ignored statuses are only logged at debug level."""
        response = handle_exception(make_request(), NotFound("Cannot find /x"))

        assert response.status_code == 404
        mock_reporting["record_error"].assert_not_called()
        mock_reporting["logger"].opt.assert_not_called()
        mock_reporting["logger"].debug.assert_called_once()

    def test_never_raises(
        self,
        make_request: Any,
        mock_reporting: dict[str, MockType],
        mocker: MockerFixture,
    ) -> None:
        """A failure while handling falls back to a plain 500."""
        mocker.patch(
            "src.api.middleware.error_handler.normalize_exception",
            side_effect=TypeError("broken"),
        )

        response = handle_exception(make_request(), ValueError("x"))

        assert response.status_code == 500
        assert orjson.loads(response.body) == InternalServerError().to_dict()
        mock_reporting["logger"].opt.return_value.critical.assert_called_once()

    def test_build_error_response_body(self) -> None:
        """Bodies contain exactly name, status and message."""
        response = build_error_response(
            BadRequest("Name is required", cause=ValueError("internal"))
        )

        assert response.status_code == 400
        assert orjson.loads(response.body) == {
            "name": "BadRequest",
            "status": 400,
            "message": "Name is required",
        }


@pytest.mark.unit
class TestExceptionHandlers:
    """Test the transport-level exception handlers."""

    @pytest.mark.timeout(5)
    async def test_not_found_names_the_url(
        self, make_request: Any, mock_reporting: dict[str, MockType]
    ) -> None:
        """Unmatched paths report the URL that could not be found."""
        _ = mock_reporting
        request = make_request(path="/does-not-exist", query_string=b"a=1")

        response = await http_exception_handler(
            request, HTTPException(status_code=404)
        )

        assert response.status_code == 404
        assert orjson.loads(response.body) == {
            "name": "NotFound",
            "status": 404,
            "message": "Cannot find /does-not-exist?a=1",
        }

    @pytest.mark.timeout(5)
    async def test_other_http_exceptions(
        self, make_request: Any, mock_reporting: dict[str, MockType]
    ) -> None:
        """Other transport errors keep their status."""
        _ = mock_reporting

        response = await http_exception_handler(
            make_request(), HTTPException(status_code=405)
        )

        assert response.status_code == 405
        assert orjson.loads(response.body)["name"] == "MethodNotAllowed"

    @pytest.mark.timeout(5)
    async def test_request_validation_error(
        self, make_request: Any, mock_reporting: dict[str, MockType]
    ) -> None:
        """Framework validation errors become 422 responses."""
        _ = mock_reporting

        response = await validation_error_handler(
            make_request(), RequestValidationError([])
        )

        assert response.status_code == 422
        assert orjson.loads(response.body)["name"] == "UnprocessableEntity"
