"""Utility modules for API-specific functionality.

- **responses**: JSON response class rendered with orjson
"""
