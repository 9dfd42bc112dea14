"""Client-visible error body.

Every error response, whatever its origin, has exactly this shape. Causes,
stack traces and fingerprints stay on the server.
"""

from pydantic import BaseModel, Field

from src.core.exceptions import ApiError


class ErrorResponse(BaseModel):
    """Uniform error response body."""

    name: str = Field(
        ...,
        description="Error name identifying the error type",
        examples=["BadRequest", "NotFound", "Unauthorized"],
    )

    status: int = Field(
        ...,
        ge=300,
        le=599,
        description="HTTP status code, identical to the response status",
        examples=[400, 404, 500],
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Name is required", "Cannot find /does-not-exist"],
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"name": "BadRequest", "status": 400, "message": "Name is required"},
                {
                    "name": "NotFound",
                    "status": 404,
                    "message": "Cannot find /does-not-exist",
                },
                {
                    "name": "InternalServerError",
                    "status": 500,
                    "message": "Oops! Something went wrong.",
                },
            ]
        }
    }

    @classmethod
    def from_error(cls, error: ApiError) -> "ErrorResponse":
        """Build the body for a normalized error."""
        return cls(name=error.name, status=error.status, message=error.message)
