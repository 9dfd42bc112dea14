"""Root conftest.py for the Routekit test suite.

This file contains project-wide fixtures and pytest configuration.
"""

import os
from collections.abc import Callable
from typing import Any

import jwt
import pytest

# Applied before any module creates the application at import time
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("OBSERVABILITY_CONFIG__ENABLE_TRACING", "false")

TEST_SECRET = "test-secret-with-enough-bytes-for-hs256"


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )


@pytest.fixture
def jwt_secret() -> str:
    """Shared secret the test tokens are signed with."""
    return TEST_SECRET


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Factory for HS256 bearer tokens signed with the test secret.

    Returns:
        Callable[..., str]: Encodes the given claims; ``secret`` overrides the key.
    """

    def _make_token(secret: str = TEST_SECRET, **claims: Any) -> str:
        payload = {"sub": "user-123", **claims}
        return jwt.encode(payload, secret, algorithm="HS256")

    return _make_token
