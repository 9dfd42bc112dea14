"""FastAPI application initialization and configuration module.

This module serves as the main entry point for the Routekit API application.
It handles:
- Application lifecycle logging (startup/shutdown)
- Middleware registration in the correct order
- Exception handler registration
- Registration of the declared routes through the route registry
- The fixed health check and root endpoints
- OpenTelemetry instrumentation

The module follows a layered middleware approach where middleware are
executed in reverse order of registration, ensuring proper request/response
processing flow.
"""

from collections.abc import AsyncGenerator, Iterable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from src.api.constants import ALL_METHODS, HEALTH_CHECK_PATH
from src.api.middleware.error_handler import register_exception_handlers
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.middleware.request_logging import RequestLoggingMiddleware
from src.api.middleware.security_headers import SecurityHeadersMiddleware
from src.api.routing import Controller, RequestDispatcher, RouteRegistry
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.logging import setup_logging
from src.core.observability import instrument_app, setup_tracing
from src.resources import ROUTES


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Args:
        app_instance: The FastAPI application instance.

    Yields:
        None: Nothing is yielded, this is just a lifespan context.
    """
    logger.info(
        "Application startup complete - {} v{} ({} routes)",
        app_instance.title,
        app_instance.version,
        len(app_instance.state.registry),
    )

    yield

    logger.info("Application shutdown complete")


async def health_check(request: Request) -> Response:
    """Liveness probe: always an empty 200."""
    _ = request
    return Response(status_code=200)


async def root(request: Request) -> Response:
    """Answer any method on the root and API prefix with an empty 204."""
    _ = request
    return Response(status_code=204)


def create_app(
    settings: Settings | None = None,
    routes: Iterable[type[Controller]] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().
        routes: Controllers to serve. Defaults to ``src.resources.ROUTES``.

    Returns:
        FastAPI: Configured FastAPI application instance.

    Raises:
        DuplicateRouteError: If two controllers declare the same method and path.
    """
    if settings is None:
        settings = get_settings()

    if routes is None:
        routes = ROUTES

    # Setup logging first
    setup_logging(settings)

    # Setup tracing
    setup_tracing(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    # Register exception handlers BEFORE middleware
    register_exception_handlers(application)

    # Register middleware AFTER exception handlers
    # Order is important: middleware are executed in reverse order of registration
    # So the last middleware added is the first to process requests

    # 4. Request logging middleware (logs requests/responses)
    application.add_middleware(RequestLoggingMiddleware, log_config=settings.log_config)

    # 3. Request context middleware (creates correlation ID)
    application.add_middleware(RequestContextMiddleware)

    # 2. Security headers middleware (adds security headers to all responses)
    application.add_middleware(
        SecurityHeadersMiddleware, hsts_enabled=settings.tls_enabled
    )

    # 1. CORS, outermost so preflight requests are answered first
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Declared routes are attached before the fixed endpoints so they win
    registry = RouteRegistry()
    registry.include(routes)
    registry.bind(
        application, RequestDispatcher(settings), prefix=settings.api_prefix
    )
    application.state.registry = registry
    application.state.settings = settings

    application.add_route(
        HEALTH_CHECK_PATH, health_check, methods=["GET"], include_in_schema=False
    )
    for path in dict.fromkeys(["/", settings.api_prefix or "/"]):
        application.add_route(path, root, methods=ALL_METHODS, include_in_schema=False)

    # Instrument application for tracing (at the end)
    instrument_app(application, settings)

    return application


app = create_app()
