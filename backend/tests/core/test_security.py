"""
Tests for bearer token authentication and the AuthContext role checks.
"""

import jwt
import pytest
from django.conf import settings
from django.test import Client

from apps.accounts.tokens import decode_access_token, issue_access_token
from apps.core.auth import AuthContext
from apps.core.exceptions import AuthError, PermissionDeniedError
from tests.accounts.factories import UserFactory
from tests.conftest import make_context

ME_URL = "/api/v1/auth/me"


def client_with(header: str) -> Client:
    return Client(headers={"Authorization": header})


@pytest.mark.django_db
class TestBearerAuth:
    """Every failure renders the error envelope with a specific code."""

    def test_missing_header_is_no_token(self, api_client) -> None:
        response = api_client.get(ME_URL)

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "NO_TOKEN"

    def test_non_bearer_scheme_is_no_token(self) -> None:
        response = client_with("Basic dXNlcjpwYXNz").get(ME_URL)

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "NO_TOKEN"

    def test_garbage_token_is_invalid(self) -> None:
        response = client_with("Bearer not-a-jwt").get(ME_URL)

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_TOKEN"

    def test_wrong_signature_is_invalid(self, member_user) -> None:
        token = jwt.encode({"sub": str(member_user.id), "exp": 9999999999}, "other-secret", algorithm="HS256")

        response = client_with(f"Bearer {token}").get(ME_URL)

        assert response.json()["error"]["code"] == "INVALID_TOKEN"

    def test_expired_token(self, member_user) -> None:
        token = issue_access_token(member_user, ttl_seconds=-1)

        response = client_with(f"Bearer {token}").get(ME_URL)

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "TOKEN_EXPIRED"

    def test_deleted_user_is_not_found(self, member_user) -> None:
        token = issue_access_token(member_user)
        member_user.soft_delete()

        response = client_with(f"Bearer {token}").get(ME_URL)

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "USER_NOT_FOUND"

    def test_user_of_deleted_company_is_not_found(self, member_user, company) -> None:
        token = issue_access_token(member_user)
        company.soft_delete()

        response = client_with(f"Bearer {token}").get(ME_URL)

        assert response.json()["error"]["code"] == "USER_NOT_FOUND"

    def test_inactive_user(self, company) -> None:
        user = UserFactory.create(company=company, is_active=False)

        response = client_with(f"Bearer {issue_access_token(user)}").get(ME_URL)

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "USER_INACTIVE"

    def test_valid_token_reaches_endpoint(self, member_client, member_user) -> None:
        response = member_client.get(ME_URL)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["id"] == str(member_user.id)
        assert data["company"]["id"] == str(member_user.company_id)
        assert data["roles"] == ["Team_Member"]


@pytest.mark.django_db
class TestAccessTokens:
    def test_claims_carry_user_and_company(self, member_user) -> None:
        claims = decode_access_token(issue_access_token(member_user))

        assert claims["sub"] == str(member_user.id)
        assert claims["company_id"] == str(member_user.company_id)
        assert claims["exp"] - claims["iat"] == settings.JWT_ACCESS_TOKEN_TTL_SECONDS

    def test_token_without_subject_is_invalid(self) -> None:
        token = jwt.encode({"exp": 9999999999}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

        with pytest.raises(AuthError) as exc_info:
            decode_access_token(token)

        assert exc_info.value.code == "INVALID_TOKEN"


@pytest.mark.django_db
class TestAuthContext:
    def test_roles_come_from_user(self, company) -> None:
        user = UserFactory.create(company=company, roles=["Team_Lead", "Client", "Bogus"])

        ctx = make_context(user)

        assert ctx.roles == frozenset({"Team_Lead", "Client"})
        assert ctx.company_id == company.id
        assert ctx.user_id == user.id

    @pytest.mark.parametrize(
        ("roles", "is_admin", "is_manager"),
        [
            (["Super_Admin"], True, True),
            (["Admin"], True, True),
            (["Project_Manager"], False, True),
            (["Team_Lead"], False, False),
            (["Team_Member"], False, False),
            (["Client"], False, False),
        ],
    )
    def test_role_tiers(self, company, roles, is_admin, is_manager) -> None:
        ctx = make_context(UserFactory.create(company=company, roles=roles))

        assert ctx.is_admin is is_admin
        assert ctx.is_manager is is_manager

    def test_require_roles_passes_on_intersection(self, member_user) -> None:
        ctx = make_context(member_user)

        assert ctx.require_roles("Admin", "Team_Member") is ctx

    def test_require_roles_rejects_disjoint_sets(self, member_user) -> None:
        ctx = make_context(member_user)

        with pytest.raises(PermissionDeniedError) as exc_info:
            ctx.require_manager()

        assert exc_info.value.status_code == 403
        assert exc_info.value.details == {"required_roles": ["Admin", "Project_Manager", "Super_Admin"]}

    def test_context_is_immutable(self, member_user) -> None:
        ctx = make_context(member_user)

        with pytest.raises(AttributeError):
            ctx.roles = frozenset({"Admin"})  # type: ignore[misc]

        assert isinstance(ctx, AuthContext)

    def test_forbidden_over_http(self, member_client, member_user) -> None:
        response = member_client.post(
            "/api/v1/users",
            {"email": "new@example.com", "first_name": "New", "last_name": "User"},
            content_type="application/json",
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"
