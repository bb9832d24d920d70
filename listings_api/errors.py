"""
Error taxonomy for the listings API.

Each ``ApiError`` carries the HTTP status and JSON body it should produce; the
exception handlers installed in ``listings_api.app`` do the rendering.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code: int = 500

    def __init__(self, message: str, *, status_code: Optional[int] = None, **extra: Any):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra

    def to_body(self, *, include_details: bool = True) -> dict:
        body = {"message": self.message}
        body.update(self.extra)
        return body


class AuthError(ApiError):
    """Missing, malformed, expired or revoked bearer token."""

    status_code = 401

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        extra = {"code": code} if code else {}
        super().__init__(message, status_code=status_code, **extra)
        self.code = code


class RequestValidationFailed(ApiError):
    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


class AuthorizationError(ApiError):
    """Authenticated, but not allowed to touch the resource."""

    status_code = 403


class DependencyError(ApiError):
    """The document store or identity provider failed unexpectedly."""

    status_code = 500

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    def to_body(self, *, include_details: bool = True) -> dict:
        body = {"message": self.message}
        if include_details and self.cause is not None:
            body["error"] = str(self.cause)
        return body


@contextmanager
def dependency_failures(message: str) -> Iterator[None]:
    """
    Convert unexpected store or identity failures inside the block into a
    ``DependencyError`` with ``message``. ``ApiError``s pass through.
    """
    try:
        yield
    except ApiError:
        raise
    except Exception as e:
        logger.exception(message)
        raise DependencyError(message, e) from e
