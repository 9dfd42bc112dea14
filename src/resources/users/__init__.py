"""Example users resource."""

from src.resources.users.controllers import Create, Get

__all__ = ["Create", "Get"]
