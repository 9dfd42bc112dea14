"""Pydantic models describing API payloads shared by all routes."""
