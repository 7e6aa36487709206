"""
Admin authentication.

There is a single admin account whose credentials come from Settings. A
successful login yields an HS256 JWT; admin-only routes depend on
`require_admin`, which validates the bearer token against the same
Settings the authenticator was built from.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.settings import Settings
from domain.errors import AuthenticationError
from domain.time import utc_now

logger = logging.getLogger(__name__)

ADMIN_USER_ID = "admin"
ADMIN_ROLE = "admin"
JWT_ALGORITHM = "HS256"


@dataclass(frozen=True, slots=True)
class AdminPrincipal:
    email: str
    user_id: str = ADMIN_USER_ID
    role: str = ADMIN_ROLE

    def summary(self) -> Dict[str, str]:
        return {"id": self.user_id, "name": "Admin", "email": self.email, "role": self.role}


class AdminAuthenticator:
    """Issues and validates admin tokens for the configured admin account."""

    def __init__(self, settings: Settings) -> None:
        settings.require_auth()
        self._email: str = settings.admin_email  # type: ignore[assignment]
        self._password: str = settings.admin_password  # type: ignore[assignment]
        self._secret: str = settings.jwt_secret  # type: ignore[assignment]
        self._ttl = timedelta(hours=settings.jwt_ttl_hours)

    def login(self, email: str, password: str) -> str:
        """
        Check credentials and return a signed token.

        Raises:
            AuthenticationError: credentials do not match the admin account
        """

        email_ok = hmac.compare_digest(email.encode("utf-8"), self._email.encode("utf-8"))
        password_ok = hmac.compare_digest(password.encode("utf-8"), self._password.encode("utf-8"))
        if not (email_ok and password_ok):
            logger.warning("Rejected admin login for %s", email)
            raise AuthenticationError("Invalid credentials", message="Invalid credentials")

        now = utc_now()
        payload: Dict[str, Any] = {
            "userId": ADMIN_USER_ID,
            "email": self._email,
            "role": ADMIN_ROLE,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def authenticate(self, token: Optional[str]) -> AdminPrincipal:
        """
        Validate a bearer token.

        Raises:
            AuthenticationError: token missing, invalid, expired, or issued
                for a different email than the configured admin
        """

        if not token:
            raise AuthenticationError(
                "No token, authorization denied", message="No token, authorization denied"
            )
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["exp", "email"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(str(e)) from e

        if claims.get("email") != self._email or claims.get("role") != ADMIN_ROLE:
            raise AuthenticationError("Token was not issued for the admin account")
        return AdminPrincipal(email=self._email)


_bearer = HTTPBearer(auto_error=False)


def get_authenticator(request: Request) -> AdminAuthenticator:
    return request.app.state.authenticator


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    authenticator: AdminAuthenticator = Depends(get_authenticator),
) -> AdminPrincipal:
    """FastAPI dependency: the request must carry a valid admin bearer token."""

    token = credentials.credentials if credentials else None
    return authenticator.authenticate(token)


def optional_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    authenticator: AdminAuthenticator = Depends(get_authenticator),
) -> Optional[AdminPrincipal]:
    """Like `require_admin`, but anonymous requests yield None instead of 401."""

    if credentials is None:
        return None
    return authenticator.authenticate(credentials.credentials)


__all__ = [
    "AdminPrincipal",
    "AdminAuthenticator",
    "get_authenticator",
    "require_admin",
    "optional_admin",
]
