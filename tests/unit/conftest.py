"""Shared fixtures for unit tests."""

import os
from collections.abc import Generator
from typing import Any

import pytest
from pytest_mock import MockerFixture, MockType
from starlette.requests import Request

from src.core.config import AuthConfig, LogConfig, Settings, get_settings
from src.core.context import RequestContext
from src.core.error_context import _get_sensitive_fields
from src.core.logging import _state


@pytest.fixture
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Provide a Settings object with test defaults.

    Returns:
        Settings: Settings object built from test environment variables.
    """
    monkeypatch.setenv("APP_NAME", "TestApp")
    monkeypatch.setenv("APP_VERSION", "1.0.0")
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("API_HOST", "127.0.0.1")
    monkeypatch.setenv("API_PORT", "3000")
    monkeypatch.setenv("OBSERVABILITY_CONFIG__ENABLE_TRACING", "false")

    return Settings()


@pytest.fixture
def auth_settings(jwt_secret: str) -> Settings:
    """Settings whose guard verifies tokens signed with the test secret."""
    return Settings(
        environment="test",
        auth_config=AuthConfig(secret=jwt_secret),
    )


@pytest.fixture
def make_request() -> Any:
    """Factory building Starlette requests from raw ASGI parts.

    Returns:
        Any: Callable returning a ``Request`` for the given method, path,
            headers, body and path parameters.
    """

    def _make_request(
        method: str = "GET",
        path: str = "/",
        headers: dict[str, str] | None = None,
        body: bytes = b"",
        query_string: bytes = b"",
        path_params: dict[str, Any] | None = None,
    ) -> Request:
        scope = {
            "type": "http",
            "http_version": "1.1",
            "method": method,
            "scheme": "http",
            "server": ("test", 80),
            "client": ("127.0.0.1", 12345),
            "root_path": "",
            "path": path,
            "query_string": query_string,
            "headers": [
                (k.lower().encode("latin-1"), v.encode("latin-1"))
                for k, v in (headers or {}).items()
            ],
            "path_params": path_params or {},
        }
        sent = False

        async def receive() -> dict[str, Any]:
            nonlocal sent
            if sent:
                return {"type": "http.disconnect"}
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}

        return Request(scope, receive)

    return _make_request


@pytest.fixture
def mock_uvicorn(mocker: MockerFixture) -> MockType:
    """Mock uvicorn.run to prevent server startup.

    Args:
        mocker: Pytest mocker fixture.

    Returns:
        MockType: The mock for assertion purposes.
    """
    return mocker.patch("uvicorn.run")


@pytest.fixture
def mock_get_settings(mocker: MockerFixture) -> MockType:
    """Mock get_settings function with customizable sensitive_fields.

    Args:
        mocker: Pytest mocker fixture.

    Returns:
        MockType: Mock get_settings function.
    """
    mock_settings = mocker.Mock(spec=Settings)
    mock_log_config = mocker.Mock(spec=LogConfig)
    mock_log_config.sensitive_fields = ["employee_id", "Birth_Date"]
    mock_settings.log_config = mock_log_config

    mock_get_settings_fn = mocker.patch("src.core.error_context.get_settings")
    mock_get_settings_fn.return_value = mock_settings

    _get_sensitive_fields.cache_clear()

    return mock_get_settings_fn


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear the LRU caches before and after each test to ensure isolation."""
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()
    yield
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[pytest.MonkeyPatch]:
    """Backup and restore environment variables to prevent test interference.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        pytest.MonkeyPatch: The monkeypatch instance for env manipulation.
    """
    original_env = os.environ.copy()

    env_prefixes = [
        "APP_",
        "API_",
        "DEBUG",
        "PORT",
        "SSL_",
        "LOG_CONFIG__",
        "AUTH_CONFIG__",
        "OBSERVABILITY_CONFIG__",
    ]
    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in env_prefixes):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("ENVIRONMENT", "test")

    yield monkeypatch

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def clean_context() -> Generator[None]:
    """Clear request context and keep logging quiet around each test."""
    RequestContext.clear()
    _state.configured = True
    yield
    RequestContext.clear()
