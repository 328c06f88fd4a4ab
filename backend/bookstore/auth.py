"""Authentication helpers and FastAPI security dependencies.

This module decodes bearer tokens issued by `AuthService.login` and
exposes dependencies that attach a `Principal` to the request:

- `get_current_principal` rejects any request without a valid, unexpired
  token signed with the configured secret.
- `require_admin` additionally requires the ADMIN role.

Verification is stateless: the principal is built from the token claims
without a database lookup.
"""

from typing import Optional

import jwt
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError

from .errors import AuthenticationError, PermissionDeniedError
from .models import UserRole
from .schemas import Principal
from .services import JWT_SECRET, JWT_ALGORITHM

bearer_scheme = HTTPBearer(auto_error=False)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Returns the decoded payload on success or raises `AuthenticationError`
    when the signature, algorithm or expiry check fails.
    """
    try:
        return jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("invalid token")


def principal_from_payload(payload: dict) -> Principal:
    try:
        return Principal(user_id=payload.get("sub"), email=payload.get("email"), role=payload.get("role"))
    except ValidationError:
        raise AuthenticationError("invalid token payload")


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> Principal:
    """FastAPI dependency that returns the authenticated principal.

    Raises `AuthenticationError` (401) when the Authorization header is
    missing, is not a bearer credential, or carries a bad token.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("missing bearer token")
    return principal_from_payload(decode_token(credentials.credentials))


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != UserRole.ADMIN:
        raise PermissionDeniedError("ADMIN role required")
    return principal
