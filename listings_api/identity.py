"""
Identity provider abstraction for Firebase Authentication and an in-memory
test implementation.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

from firebase_admin import App, auth
from firebase_admin import exceptions as firebase_exceptions


@dataclass(frozen=True)
class Identity:
    """Verified caller identity derived from a bearer token."""

    user_id: str
    email: Optional[str] = None
    email_verified: bool = False


@dataclass
class IdentityUser:
    """Canonical user record held by the identity provider."""

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    phone_number: Optional[str] = None
    photo_url: Optional[str] = None


class TokenFailure(enum.Enum):
    EXPIRED = "expired"
    REVOKED = "revoked"
    MALFORMED = "malformed"
    OTHER = "other"


class TokenVerificationError(Exception):
    """Raised when a bearer token cannot be verified."""

    def __init__(self, reason: TokenFailure, code: Optional[str] = None, message: str = ""):
        super().__init__(message or reason.value)
        self.reason = reason
        self.code = code


class UserLookupError(Exception):
    """Raised when a user record cannot be read or written."""


class IdentityVerifier(Protocol):
    """Operations the API needs from the identity provider."""

    def verify_token(self, token: str) -> Identity:
        ...

    def get_user(self, uid: str) -> IdentityUser:
        ...

    def update_user(
        self,
        uid: str,
        *,
        display_name: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> None:
        ...


@dataclass
class InMemoryIdentityVerifier:
    """Test double for the identity provider.

    ``tokens`` maps a bearer token to the user id it authenticates;
    ``token_failures`` maps a token to the failure it should raise.
    """

    tokens: Dict[str, str] = field(default_factory=dict)
    users: Dict[str, IdentityUser] = field(default_factory=dict)
    token_failures: Dict[str, TokenVerificationError] = field(default_factory=dict)
    verified_emails: set[str] = field(default_factory=set)

    def add_user(
        self,
        uid: str,
        *,
        token: Optional[str] = None,
        email: Optional[str] = None,
        display_name: Optional[str] = None,
        phone_number: Optional[str] = None,
        photo_url: Optional[str] = None,
        email_verified: bool = True,
    ) -> IdentityUser:
        user = IdentityUser(
            uid=uid,
            email=email,
            display_name=display_name,
            phone_number=phone_number,
            photo_url=photo_url,
        )
        self.users[uid] = user
        if token:
            self.tokens[token] = uid
        if email and email_verified:
            self.verified_emails.add(email)
        return user

    def verify_token(self, token: str) -> Identity:
        if not token or not isinstance(token, str):
            raise TokenVerificationError(TokenFailure.MALFORMED, "INVALID_ARGUMENT")
        if token in self.token_failures:
            raise self.token_failures[token]
        uid = self.tokens.get(token)
        if uid is None:
            raise TokenVerificationError(
                TokenFailure.MALFORMED, "INVALID_ARGUMENT", "Unknown token"
            )
        user = self.users.get(uid)
        email = user.email if user else None
        return Identity(
            user_id=uid,
            email=email,
            email_verified=bool(email and email in self.verified_emails),
        )

    def get_user(self, uid: str) -> IdentityUser:
        user = self.users.get(uid)
        if user is None:
            raise UserLookupError(f"No user record found for the provided user ID: {uid}")
        return user

    def update_user(
        self,
        uid: str,
        *,
        display_name: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> None:
        user = self.get_user(uid)
        if display_name is not None:
            user.display_name = display_name
        if photo_url is not None:
            user.photo_url = photo_url

    def reset(self) -> None:
        """Clear all users and tokens (useful in tests)."""
        self.tokens.clear()
        self.users.clear()
        self.token_failures.clear()
        self.verified_emails.clear()


class FirebaseIdentityVerifier:
    """
    Firebase Authentication backed verifier. Revoked tokens are rejected.
    """

    def __init__(self, app: Optional[App] = None):
        self.app = app

    def verify_token(self, token: str) -> Identity:
        try:
            decoded = auth.verify_id_token(token, app=self.app, check_revoked=True)
        # Expired and revoked errors subclass InvalidIdTokenError; order matters.
        except auth.ExpiredIdTokenError as e:
            raise TokenVerificationError(TokenFailure.EXPIRED, e.code, str(e)) from e
        except auth.RevokedIdTokenError as e:
            raise TokenVerificationError(TokenFailure.REVOKED, e.code, str(e)) from e
        except auth.InvalidIdTokenError as e:
            raise TokenVerificationError(TokenFailure.MALFORMED, e.code, str(e)) from e
        except ValueError as e:
            raise TokenVerificationError(
                TokenFailure.MALFORMED, "INVALID_ARGUMENT", str(e)
            ) from e
        except firebase_exceptions.FirebaseError as e:
            raise TokenVerificationError(TokenFailure.OTHER, e.code, str(e)) from e

        return Identity(
            user_id=decoded["uid"],
            email=decoded.get("email"),
            email_verified=bool(decoded.get("email_verified", False)),
        )

    def get_user(self, uid: str) -> IdentityUser:
        try:
            record = auth.get_user(uid, app=self.app)
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            raise UserLookupError(str(e)) from e
        return IdentityUser(
            uid=record.uid,
            email=record.email,
            display_name=record.display_name,
            phone_number=record.phone_number,
            photo_url=record.photo_url,
        )

    def update_user(
        self,
        uid: str,
        *,
        display_name: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> None:
        kwargs = {}
        if display_name is not None:
            kwargs["display_name"] = display_name
        if photo_url is not None:
            kwargs["photo_url"] = photo_url
        if not kwargs:
            return
        try:
            auth.update_user(uid, app=self.app, **kwargs)
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            raise UserLookupError(str(e)) from e
