"""Issuing and validating HMAC-signed JSON Web Tokens."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

_HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")
_SIGNING_ALGORITHM = _HMAC_ALGORITHMS[0]

DEFAULT_USER_ID = 1
DEFAULT_EMAIL = "user@example.com"
"""Identity returned by validate_token when authentication is disabled."""


class AuthError(Exception):
    """Base class for token errors; an optional context prefixes the message."""

    default_message = "authentication error"

    def __init__(self, context: str | None = None) -> None:
        text = f"{context}: {self.default_message}" if context else self.default_message
        super().__init__(text)


class InvalidTokenError(AuthError):
    default_message = "invalid token"


class ExpiredTokenError(AuthError):
    default_message = "token has expired"


class InvalidTypeError(AuthError):
    default_message = "invalid token type"


@dataclass(frozen=True)
class Claims:
    """The user identity carried by a token."""

    user_id: int
    email: str


@dataclass(frozen=True)
class TokenResponse:
    """A signed token and the moment it expires."""

    token: str
    expires_at: datetime


@dataclass
class Operator:
    """Signs and checks tokens with a shared secret."""

    enable: bool
    jwt_secret: str
    jwt_duration: timedelta

    def _sign(self, user: Claims, ttl: timedelta) -> TokenResponse:
        now = datetime.now(timezone.utc)
        expires_at = now + ttl
        payload = {
            "user_id": user.user_id,
            "email": user.email,
            "exp": int(expires_at.timestamp()),
            "iat": int(now.timestamp()),
        }
        encoded = jwt.encode(payload, self.jwt_secret, algorithm=_SIGNING_ALGORITHM)
        return TokenResponse(token=encoded, expires_at=expires_at)

    def generate_token(self, user: Claims) -> TokenResponse:
        """Issue a token valid for the operator's configured duration."""
        return self._sign(user, self.jwt_duration)

    def generate_token_with_ttl(self, user: Claims, ttl: timedelta) -> TokenResponse:
        """Issue a token valid for ttl; ttl must be positive."""
        if ttl.total_seconds() <= 0:
            raise InvalidTypeError("invalid TTL")
        return self._sign(user, ttl)

    def validate_token(self, token: str) -> Claims:
        """Verify a token and return its claims.

        When the operator is disabled a fixed default identity is returned
        without looking at the token.
        """
        if not self.enable:
            return Claims(user_id=DEFAULT_USER_ID, email=DEFAULT_EMAIL)

        try:
            payload = jwt.decode(
                token, self.jwt_secret, algorithms=list(_HMAC_ALGORITHMS)
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredTokenError() from exc
        except jwt.PyJWTError as exc:
            raise InvalidTokenError(f"parsing JWT token: {exc}") from exc

        if not isinstance(payload, dict):
            raise InvalidTokenError("extracting JWT claims")

        exp = payload.get("exp")
        if not _is_number(exp) or int(time.time()) > exp:
            raise ExpiredTokenError()

        user_id = payload.get("user_id")
        if not _is_number(user_id):
            raise InvalidTypeError("claims user id")
        email = payload.get("email")
        if not isinstance(email, str):
            raise InvalidTypeError("claims email")

        return Claims(user_id=int(user_id), email=email)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)