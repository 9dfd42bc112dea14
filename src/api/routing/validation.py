"""Request body validation middleware backed by pydantic models.

The model acts as the constraint engine: the adapter only decides how its
first violation is presented to the client. Validation stops at the first
violated field (in field declaration order) so clients fix one problem at a
time.
"""

from typing import Any

import pydantic
from pydantic import BaseModel

from src.api.routing.context import ApiRequest, ApiResponse, Middleware
from src.core.exceptions import BadRequest

FALLBACK_MESSAGE = "Looks like something is missing. Please try again."


def capitalize_first(text: str) -> str:
    """Upper-case the first character and leave the rest untouched."""
    return text[:1].upper() + text[1:]


def first_violation_message(exc: pydantic.ValidationError) -> str | None:
    """Render the first violation of a validation error as a sentence.

    Missing fields read ``"<field> is required"``. Messages raised by the
    model's own validators are used verbatim. Anything else is prefixed with
    the field name.

    Args:
        exc: The error raised by ``model_validate``.

    Returns:
        str | None: The message, or None when pydantic reported nothing usable.
    """
    errors = exc.errors(include_url=False)
    if not errors:
        return None

    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    error_type = first.get("type", "")
    msg = str(first.get("msg", "")).strip()

    if error_type == "missing" and field:
        return f"{field} is required"

    if error_type in ("value_error", "assertion_error") and "error" in first.get(
        "ctx", {}
    ):
        return str(first["ctx"]["error"]).strip()

    if not field:
        return msg or None

    return f"{field} {msg[:1].lower()}{msg[1:]}" if msg else None


def validator(schema: type[BaseModel]) -> Middleware:
    """Build a middleware that validates the request body against ``schema``.

    On success the validated model is stored on ``request.validated``.

    Args:
        schema: The pydantic model class (not an instance).

    Returns:
        Middleware: The validation middleware.
    """

    async def validate_body(request: ApiRequest, response: ApiResponse) -> None:
        _ = response
        payload: Any = request.body if request.body is not None else {}
        try:
            request.validated = schema.model_validate(payload)
        except pydantic.ValidationError as e:
            message = first_violation_message(e)
            raise BadRequest(
                capitalize_first(message) if message else FALLBACK_MESSAGE,
                cause=e,
            ) from e

    validate_body.__qualname__ = f"validator({schema.__name__})"
    return validate_body
