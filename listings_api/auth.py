"""
Bearer-token authentication for protected routes.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Request

from listings_api.dependencies import get_identity_verifier
from listings_api.errors import AuthError
from listings_api.identity import (
    Identity,
    IdentityVerifier,
    TokenFailure,
    TokenVerificationError,
)

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
NO_TOKEN_MESSAGE = "Unauthorized: No token provided"


def _auth_error(error: TokenVerificationError) -> AuthError:
    if error.reason is TokenFailure.EXPIRED:
        return AuthError("Token expired", code="TOKEN_EXPIRED")
    if error.reason is TokenFailure.REVOKED:
        return AuthError("Token revoked", code="TOKEN_REVOKED")
    if error.reason is TokenFailure.MALFORMED:
        return AuthError(
            "Invalid token format", code="INVALID_TOKEN_FORMAT", status_code=400
        )
    return AuthError(
        "Unauthorized: Invalid token", code=error.code or "UNKNOWN_ERROR"
    )


def require_identity(
    request: Request,
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> Identity:
    """
    Verify the request's bearer token and attach the caller's identity to
    ``request.state.identity``.
    """
    header = request.headers.get("Authorization")
    if not header or not header.startswith(BEARER_PREFIX):
        raise AuthError(NO_TOKEN_MESSAGE)

    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthError(NO_TOKEN_MESSAGE)

    try:
        identity = verifier.verify_token(token)
    except TokenVerificationError as e:
        logger.warning("Token verification failed (%s): %s", e.reason.value, e)
        raise _auth_error(e) from e
    except Exception as e:
        logger.exception("Unexpected error verifying token")
        raise AuthError(
            "Unauthorized: Invalid token", code=getattr(e, "code", None) or "UNKNOWN_ERROR"
        ) from e

    request.state.identity = identity
    return identity
