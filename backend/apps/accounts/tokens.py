"""
Access token signing and verification.

Token issuance flows (login, refresh, password reset) live outside this
service; issue_access_token exists so deployments and tests can mint a token
that the bearer auth path accepts.
"""

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import jwt
from django.conf import settings

from apps.core.exceptions import AuthError

if TYPE_CHECKING:
    from apps.accounts.models import User


def issue_access_token(user: "User", ttl_seconds: int | None = None) -> str:
    """Sign a short-lived access token for the user."""
    now = datetime.now(UTC)
    ttl = ttl_seconds if ttl_seconds is not None else settings.JWT_ACCESS_TOKEN_TTL_SECONDS
    claims = {
        "sub": str(user.id),
        "company_id": str(user.company_id),
        "iat": now,
        "exp": now + timedelta(seconds=ttl),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises:
        AuthError: TOKEN_EXPIRED for expired tokens, INVALID_TOKEN otherwise
    """
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthError("Token has expired", code="TOKEN_EXPIRED") from None
    except jwt.InvalidTokenError:
        raise AuthError("Invalid token", code="INVALID_TOKEN") from None
    return claims
