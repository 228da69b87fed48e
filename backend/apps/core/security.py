"""
Core security - authentication classes for API.
"""

from uuid import UUID

from django.http import HttpRequest
from ninja.security import HttpBearer

from apps.core.auth import AuthContext
from apps.core.exceptions import AuthError
from apps.core.logging import bind_contextvars, get_logger

logger = get_logger(__name__)


class BearerAuth(HttpBearer):
    """
    Bearer token authentication for API endpoints.

    Verifies the JWT, loads the user and its company and returns an
    AuthContext, which django-ninja stores on request.auth. Every failure
    raises AuthError so the exception handlers render the standard envelope
    with a specific code instead of ninja's bare 401.
    """

    def __call__(self, request: HttpRequest) -> AuthContext | None:
        if not request.headers.get(self.header):
            raise AuthError("Not authorized, no token provided", code="NO_TOKEN")
        result = super().__call__(request)
        if result is None:
            # Header present but not a Bearer scheme
            raise AuthError("Not authorized, no token provided", code="NO_TOKEN")
        return result

    def authenticate(self, request: HttpRequest, token: str) -> AuthContext:
        from apps.accounts.models import User
        from apps.accounts.tokens import decode_access_token

        if not token:
            raise AuthError("Not authorized, no token provided", code="NO_TOKEN")

        claims = decode_access_token(token)
        try:
            user_id = UUID(str(claims["sub"]))
        except ValueError:
            raise AuthError("Invalid token", code="INVALID_TOKEN") from None

        user = User.objects.alive().select_related("company").filter(pk=user_id).first()
        if user is None or user.company.is_deleted:
            raise AuthError("User not found", code="USER_NOT_FOUND")
        if not user.is_active:
            raise AuthError("User account is deactivated", code="USER_INACTIVE")

        bind_contextvars(**{"usr.id": str(user.id), "company.id": str(user.company_id)})
        return AuthContext(user=user, company=user.company, roles=user.role_set)


def get_auth_context(request: HttpRequest) -> AuthContext:
    """
    Get the AuthContext attached by BearerAuth.

    Raises:
        AuthError: If the endpoint was reached without authentication
    """
    ctx = getattr(request, "auth", None)
    if not isinstance(ctx, AuthContext):
        raise AuthError("Not authorized, no token provided", code="NO_TOKEN")
    return ctx
