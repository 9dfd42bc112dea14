"""Bearer token verification for guarded routes.

Tokens are HS256-signed JWTs sent as ``Authorization: Bearer <token>``.
Audience and issuer are only checked when configured.
"""

import jwt
from loguru import logger

from src.core.config import AuthConfig
from src.core.exceptions import Unauthorized
from src.core.types import Claims

BEARER_PREFIX = "bearer "


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an Authorization header value, if any."""
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX) :].strip()
    return token or None


def verify_bearer_token(authorization: str | None, auth_config: AuthConfig) -> Claims:
    """Verify the bearer token carried by ``authorization``.

    Args:
        authorization: Raw value of the Authorization header.
        auth_config: Secret, audience and issuer to verify against.

    Returns:
        Claims: The decoded token claims.

    Raises:
        Unauthorized: If the token is missing, malformed, expired, or fails
            the signature, audience or issuer checks.
    """
    token = extract_bearer_token(authorization)
    if token is None:
        raise Unauthorized("No authorization token was found")

    try:
        claims: Claims = jwt.decode(
            token,
            auth_config.secret,
            algorithms=[auth_config.algorithm],
            audience=auth_config.audience,
            issuer=auth_config.issuer,
            leeway=auth_config.leeway_seconds,
            options={"verify_aud": auth_config.audience is not None},
        )
    except jwt.ExpiredSignatureError as e:
        logger.debug("Rejected expired token")
        raise Unauthorized("Token has expired", cause=e) from e
    except jwt.InvalidTokenError as e:
        logger.debug("Rejected invalid token: {}", type(e).__name__)
        raise Unauthorized("Invalid token", cause=e) from e

    return claims
