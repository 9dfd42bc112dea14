"""Status-bearing exception taxonomy for consistent client error responses.

Every failure a client can observe is expressed as an ``ApiError``. Each
supported HTTP status has its own subclass carrying a default message and a
default name (the class name); both can be overridden per instance.

Features:
- **Exception chaining**: the original cause is preserved for server-side use
- **Stack trace capture**: full context at error creation time
- **Error fingerprinting**: automatic grouping of similar errors in reports

Errors flow one way, towards the error normalizer in
``src.api.middleware.error_handler``. They are never mutated after creation.
"""

import hashlib
import traceback
from http import HTTPStatus
from typing import ClassVar


class ApiError(Exception):
    """Base exception for every client-facing failure.

    Args:
        message: Human-readable error message (defaults to the class default)
        cause: The original exception that caused this error
        name: Error name override (defaults to the class name)
        status: Status override, only meaningful on the base class
    """

    status: int = 500
    default_message: ClassVar[str] = "Oops! Something went wrong."

    def __init__(
        self,
        message: str | None = None,
        cause: BaseException | None = None,
        name: str | None = None,
        *,
        status: int | None = None,
    ) -> None:
        if status is not None:
            self.status = status
        self.message = message if message is not None else self.default_message
        self.name = name or _default_name(type(self), self.status)
        self.cause = cause

        # Capture stack trace at creation time
        self.stack_trace = traceback.format_stack()[:-1]  # Exclude this frame

        self.fingerprint = self._generate_fingerprint()

        super().__init__(self.message)
        if cause is not None:
            self.__cause__ = cause

    def _generate_fingerprint(self) -> str:
        """Generate a fingerprint for error grouping.

        Creates a hash based on the error name, status and the location where
        it was raised, allowing similar errors to be grouped in reports.

        Returns:
            str: A hash string for error grouping
        """
        max_frames = 5
        relevant_frames = self.stack_trace[-max_frames:]

        fingerprint_data = f"{self.name}:{self.status}"
        for frame in relevant_frames:
            if "site-packages" not in frame and "src/" in frame:
                lines = frame.strip().split("\n")
                if lines:
                    fingerprint_data += f":{lines[0]}"

        return hashlib.sha256(fingerprint_data.encode()).hexdigest()[:16]

    def to_dict(self) -> dict[str, str | int]:
        """Return the client-visible representation of the error.

        Returns:
            dict[str, str | int]: The ``name``, ``status`` and ``message`` fields
        """
        return {"name": self.name, "status": self.status, "message": self.message}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        cause_str = f", cause={type(self.cause).__name__}" if self.cause else ""
        return (
            f"{type(self).__name__}(status={self.status}, name='{self.name}', "
            f"message='{self.message}'{cause_str})"
        )


def _default_name(error_class: type[ApiError], status: int) -> str:
    """Resolve the default name for an error.

    Subclasses are named after themselves. The base class, used for coerced
    statuses without a dedicated subclass, is named after the reason phrase.
    """
    if error_class is not ApiError:
        return error_class.__name__
    try:
        phrase = HTTPStatus(status).phrase
    except ValueError:
        return "Error"
    return "".join(word.capitalize() for word in phrase.replace("-", " ").split())


# Redirects


class MovedPermanently(ApiError):
    status = 301
    default_message = "Moved Permanently"


class TemporaryRedirect(ApiError):
    status = 307
    default_message = "Temporary Redirect"


class PermanentRedirect(ApiError):
    status = 308
    default_message = "Permanent Redirect"


# Client errors


class BadRequest(ApiError):
    """Raised when the request is malformed or fails validation."""

    status = 400
    default_message = "Bad Request"


class Unauthorized(ApiError):
    """Raised when authentication is missing or invalid."""

    status = 401
    default_message = "Unauthorized"


class PaymentRequired(ApiError):
    status = 402
    default_message = "Payment Required"


class Forbidden(ApiError):
    """Raised when an authenticated caller lacks permission."""

    status = 403
    default_message = "Forbidden"


class NotFound(ApiError):
    """Raised when a route or resource does not exist."""

    status = 404
    default_message = "Not Found"


class MethodNotAllowed(ApiError):
    status = 405
    default_message = "Method Not Allowed"


class NotAcceptable(ApiError):
    status = 406
    default_message = "Not Acceptable"


class RequestTimeout(ApiError):
    status = 408
    default_message = "Request Timeout"


class Conflict(ApiError):
    status = 409
    default_message = "Conflict"


class Gone(ApiError):
    status = 410
    default_message = "Gone"


class LengthRequired(ApiError):
    status = 411
    default_message = "Length Required"


class PreconditionFailed(ApiError):
    status = 412
    default_message = "Precondition Failed"


class PayloadTooLarge(ApiError):
    status = 413
    default_message = "Payload Too Large"


class UriTooLong(ApiError):
    status = 414
    default_message = "URI Too Long"


class ImATeapot(ApiError):
    status = 418
    default_message = "I'm a Teapot"


class UnprocessableEntity(ApiError):
    status = 422
    default_message = "Unprocessable Entity"


class TooManyRequests(ApiError):
    status = 429
    default_message = "Too Many Requests"


# Server errors


class InternalServerError(ApiError):
    """Fallback for every failure without a plausible status."""

    status = 500
    default_message = "Oops! Something went wrong."


class NotImplementedFault(ApiError):
    """Raised for endpoints that exist but are not implemented.

    Named so it does not shadow the ``NotImplementedError`` builtin; the
    client-visible name stays ``NotImplemented``.
    """

    status = 501
    default_message = "Not Implemented"

    def __init__(
        self,
        message: str | None = None,
        cause: BaseException | None = None,
        name: str | None = None,
    ) -> None:
        super().__init__(message, cause, name or "NotImplemented")


class BadGateway(ApiError):
    status = 502
    default_message = "Bad Gateway"


class ServiceUnavailable(ApiError):
    status = 503
    default_message = "Service Unavailable"


class GatewayTimeout(ApiError):
    status = 504
    default_message = "Gateway Timeout"


class BandwidthLimitExceeded(ApiError):
    status = 509
    default_message = "Bandwidth Limit Exceeded"


ERRORS_BY_STATUS: dict[int, type[ApiError]] = {
    error_class.status: error_class
    for error_class in (
        MovedPermanently,
        TemporaryRedirect,
        PermanentRedirect,
        BadRequest,
        Unauthorized,
        PaymentRequired,
        Forbidden,
        NotFound,
        MethodNotAllowed,
        NotAcceptable,
        RequestTimeout,
        Conflict,
        Gone,
        LengthRequired,
        PreconditionFailed,
        PayloadTooLarge,
        UriTooLong,
        ImATeapot,
        UnprocessableEntity,
        TooManyRequests,
        InternalServerError,
        NotImplementedFault,
        BadGateway,
        ServiceUnavailable,
        GatewayTimeout,
        BandwidthLimitExceeded,
    )
}
