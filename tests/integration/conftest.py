"""Shared fixtures for integration tests.

Every test gets a fresh application built from explicit settings, so tests
never depend on the module-level app or on the process environment.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable, Generator

import pytest
from httpx import ASGITransport, AsyncClient
from loguru import logger

from src.api.main import create_app
from src.core.config import AuthConfig, ObservabilityConfig, Settings, get_settings
from src.core.context import RequestContext
from src.core.logging import _state

SettingsClientFactoryType = Callable[[Settings], Awaitable[AsyncClient]]


@pytest.fixture
def app_settings(jwt_secret: str) -> Settings:
    """Settings used by the default test client."""
    return Settings(
        environment="test",
        auth_config=AuthConfig(secret=jwt_secret),
        observability_config=ObservabilityConfig(enable_tracing=False),
    )


@pytest.fixture
async def client(app_settings: Settings) -> AsyncGenerator[AsyncClient]:
    """Create test client for a fresh application."""
    app = create_app(app_settings)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def client_with_settings() -> AsyncGenerator[SettingsClientFactoryType]:
    """Factory fixture for creating test clients with custom settings.

    Usage:
        async def test_something(client_with_settings):
            settings = Settings(api_prefix="/api")
            client = await client_with_settings(settings)
    """
    clients = []

    async def _create_client(settings: Settings) -> AsyncClient:
        app = create_app(settings)
        transport = ASGITransport(app=app)
        client = AsyncClient(transport=transport, base_url="http://test")
        clients.append(client)
        return client

    yield _create_client

    for client in clients:
        await client.aclose()


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None]:
    """Automatically clear settings cache before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clean_request_context() -> Generator[None]:
    """Automatically clear RequestContext before and after each test."""
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture(autouse=True)
def reset_logging_state() -> Generator[None]:
    """Keep app creation from installing stdout handlers during tests."""
    logger.remove()
    _state.configured = True
    yield
    _state.configured = True
    logger.remove()
