"""Error normalization and reporting for every failure raised during a request.

All failures end up here, whether raised by the guard, route middleware, a
controller or the transport itself. Handling is linear:

1. **Classify**: ``ApiError`` instances pass through unchanged.
2. **Coerce**: any other exception is inspected for a status-like attribute
   (``status``, ``status_code``, ``code``). A plausible error status
   (300-599) is kept; anything else becomes ``InternalServerError``. Server
   errors (5xx) always carry their default message. The original exception
   is preserved as ``cause`` for server-side use.
3. **Deliver**: errors whose status is not in the configured ignore list are
   reported to the logs and to tracing. The client always receives
   ``{"name", "status", "message"}``, never the cause or trace.

``handle_exception`` never raises.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from src.api.schemas.errors import ErrorResponse
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.constants import (
    MAX_ERROR_STATUS,
    MIN_ERROR_STATUS,
    MIN_SERVER_ERROR_STATUS,
)
from src.core.context import RequestContext
from src.core.error_context import sanitize_error_context, sanitize_headers
from src.core.exceptions import (
    ERRORS_BY_STATUS,
    ApiError,
    InternalServerError,
    NotFound,
    UnprocessableEntity,
)
from src.core.observability import record_error

STATUS_ATTRIBUTES = ("status", "status_code", "code")


def coerce_status(exc: BaseException) -> int | None:
    """Find a plausible HTTP error status on an arbitrary exception.

    Args:
        exc: The exception to inspect.

    Returns:
        int | None: The first attribute value that looks like a 3xx, 4xx or
            5xx status, or None if there is none.
    """
    for attribute in STATUS_ATTRIBUTES:
        value = getattr(exc, attribute, None)
        if isinstance(value, bool):
            continue
        if isinstance(value, str) and value.isdigit():
            value = int(value)
        if isinstance(value, int) and MIN_ERROR_STATUS <= value <= MAX_ERROR_STATUS:
            return value
    return None


def _message_of(exc: BaseException) -> str | None:
    detail = getattr(exc, "detail", None)
    if isinstance(detail, str) and detail:
        return detail
    return str(exc) or None


def normalize_exception(exc: BaseException) -> ApiError:
    """Convert any exception into a member of the error taxonomy.

    Args:
        exc: The exception raised while handling a request.

    Returns:
        ApiError: ``exc`` itself when it already is one, otherwise a new error
            wrapping ``exc`` as its cause.
    """
    if isinstance(exc, ApiError):
        return exc

    status = coerce_status(exc)
    if status is None:
        # Internal messages are never shown to clients
        return InternalServerError(cause=exc)

    # Server-side failures keep their status but not their message
    message = _message_of(exc) if status < MIN_SERVER_ERROR_STATUS else None
    error_class = ERRORS_BY_STATUS.get(status)
    if error_class is not None:
        return error_class(message, cause=exc)
    return ApiError(message, cause=exc, status=status)


def settings_for(request: Request) -> Settings:
    """Settings of the application serving ``request``.

    ``create_app`` stores its settings on the application state; requests
    handled outside such an application fall back to ``get_settings()``.
    """
    app = request.scope.get("app")
    settings = getattr(getattr(app, "state", None), "settings", None)
    if isinstance(settings, Settings):
        return settings
    return get_settings()


def should_report(error: ApiError, settings: Settings) -> bool:
    """Whether ``error`` is forwarded to logs and telemetry."""
    return error.status not in settings.log_config.ignored_status_codes


def report_error(request: Request, error: ApiError) -> None:
    """Forward an error to the logs and the current trace span.

    The request context is sanitized first; auth headers, cookies and
    secrets never leave the process.

    Args:
        request: The request that failed.
        error: The normalized error.
    """
    auth = getattr(request.state, "auth", None)
    error_context = sanitize_error_context(
        error.cause or error,
        {
            "request_method": request.method,
            "request_path": request.url.path,
            "query_params": dict(request.query_params),
            "headers": sanitize_headers(dict(request.headers)),
            "user": auth.get("sub") if isinstance(auth, dict) else None,
        },
    )

    logger.opt(exception=error.cause or error).error(
        "{name} ({status}): {message}",
        name=error.name,
        status=error.status,
        message=error.message,
        correlation_id=RequestContext.get_correlation_id(),
        fingerprint=error.fingerprint,
        **error_context,
    )
    record_error(error)


def build_error_response(error: ApiError) -> Response:
    """Serialize the client-visible body of ``error``."""
    return ORJSONResponse(
        status_code=error.status,
        content=ErrorResponse.from_error(error).model_dump(mode="json"),
    )


def handle_exception(request: Request, exc: BaseException) -> Response:
    """Normalize, report and render any exception. Never raises.

    Args:
        request: The request that failed.
        exc: The exception raised while handling it.

    Returns:
        Response: The error response to send.
    """
    try:
        error = normalize_exception(exc)
        if should_report(error, settings_for(request)):
            report_error(request, error)
        else:
            logger.debug(
                "Handled expected {name} ({status}): {message}",
                name=error.name,
                status=error.status,
                message=error.message,
            )
        return build_error_response(error)
    except Exception:
        logger.opt(exception=True).critical("Error normalization failed")
        fallback = InternalServerError()
        return ORJSONResponse(status_code=fallback.status, content=fallback.to_dict())


async def api_error_handler(request: Request, exc: Exception) -> Response:
    """Handle ``ApiError`` raised outside the route dispatcher."""
    return handle_exception(request, exc)


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle transport-level HTTP errors.

    Unmatched paths arrive here as a 404 and are answered with the URL that
    could not be found.
    """
    if isinstance(exc, HTTPException) and exc.status_code == NotFound.status:
        query = request.url.query
        url = f"{request.url.path}?{query}" if query else request.url.path
        return handle_exception(request, NotFound(f"Cannot find {url}", cause=exc))
    return handle_exception(request, exc)


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle FastAPI parameter validation errors on framework-level routes."""
    return handle_exception(request, UnprocessableEntity(cause=exc))


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle anything else that escaped the transport middleware stack."""
    return handle_exception(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Route every exception the application can raise to the normalizer.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.debug("Exception handlers registered")
