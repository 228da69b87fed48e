"""
Tests for accounts API endpoints.
"""

import pytest

from apps.accounts.models import User
from tests.accounts.factories import UserFactory
from tests.conftest import bearer_client

JSON = "application/json"


@pytest.mark.django_db
class TestCurrentUser:
    def test_me(self, admin_client, admin_user, company) -> None:
        response = admin_client.get("/api/v1/auth/me")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["email"] == admin_user.email
        assert data["user"]["full_name"] == f"{admin_user.first_name} {admin_user.last_name}"
        assert data["company"] == {"id": str(company.id), "name": "Acme", "domain": company.domain, "logo": ""}
        assert data["roles"] == ["Admin"]


@pytest.mark.django_db
class TestUserDirectory:
    def test_lists_company_users_only(self, member_client, member_user, admin_user, other_company) -> None:
        UserFactory.create(company=other_company)

        response = member_client.get("/api/v1/users")

        assert {u["id"] for u in response.json()["data"]} == {str(member_user.id), str(admin_user.id)}

    def test_filter_by_role(self, admin_client, admin_user, member_user, company) -> None:
        UserFactory.create(company=company, roles=["Super_Admin"])

        response = admin_client.get("/api/v1/users", {"role": "Admin"})

        assert [u["id"] for u in response.json()["data"]] == [str(admin_user.id)]

    def test_unknown_role_filter(self, admin_client) -> None:
        response = admin_client.get("/api/v1/users", {"role": "Wizard"})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Invalid value for filter 'role': Wizard"

    def test_other_tenant_user_is_not_found(self, member_client, other_company) -> None:
        stranger = UserFactory.create(company=other_company)

        assert member_client.get(f"/api/v1/users/{stranger.id}").status_code == 404


@pytest.mark.django_db
class TestInvite:
    def test_admin_invites_with_default_role(self, admin_client, company) -> None:
        response = admin_client.post(
            "/api/v1/users",
            {"email": "  Jane@Company.com ", "first_name": "Jane", "last_name": "Doe"},
            content_type=JSON,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["email"] == "jane@company.com"
        assert data["roles"] == [company.default_role]
        assert data["company_id"] == str(company.id)

    def test_member_cannot_invite(self, member_client) -> None:
        response = member_client.post(
            "/api/v1/users",
            {"email": "x@example.com", "first_name": "X", "last_name": "Y"},
            content_type=JSON,
        )

        assert response.status_code == 403
        assert response.json()["error"]["details"] == {"required_roles": ["Admin", "Super_Admin"]}

    def test_duplicate_email_in_company(self, admin_client, member_user) -> None:
        response = admin_client.post(
            "/api/v1/users",
            {"email": member_user.email.upper(), "first_name": "X", "last_name": "Y"},
            content_type=JSON,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "DUPLICATE_FIELD"
        assert response.json()["error"]["details"]["field"] == "email"

    def test_email_taken_in_another_company(self, admin_client, other_company) -> None:
        stranger = UserFactory.create(company=other_company)

        response = admin_client.post(
            "/api/v1/users",
            {"email": stranger.email, "first_name": "X", "last_name": "Y"},
            content_type=JSON,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "DUPLICATE_FIELD"

    def test_invalid_roles(self, admin_client) -> None:
        response = admin_client.post(
            "/api/v1/users",
            {"email": "x@example.com", "first_name": "X", "last_name": "Y", "roles": ["Wizard"]},
            content_type=JSON,
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Invalid roles: Wizard"


@pytest.mark.django_db
class TestUpdateUser:
    def test_user_edits_own_profile(self, member_client, member_user) -> None:
        response = member_client.put(
            f"/api/v1/users/{member_user.id}",
            {"first_name": "Sam", "timezone": "Europe/Berlin"},
            content_type=JSON,
        )

        assert response.status_code == 200
        assert response.json()["data"]["first_name"] == "Sam"

    def test_member_cannot_edit_others(self, member_client, admin_user) -> None:
        response = member_client.put(f"/api/v1/users/{admin_user.id}", {"first_name": "X"}, content_type=JSON)

        assert response.status_code == 403

    def test_member_cannot_change_own_roles(self, member_client, member_user) -> None:
        response = member_client.put(
            f"/api/v1/users/{member_user.id}",
            {"roles": ["Admin"]},
            content_type=JSON,
        )

        assert response.status_code == 403
        assert response.json()["error"]["details"] == {"fields": ["roles"]}
        member_user.refresh_from_db()
        assert member_user.roles == ["Team_Member"]

    def test_admin_changes_roles(self, admin_client, member_user) -> None:
        response = admin_client.put(
            f"/api/v1/users/{member_user.id}",
            {"roles": ["Team_Lead", "Team_Lead"], "is_active": False},
            content_type=JSON,
        )

        data = response.json()["data"]
        assert data["roles"] == ["Team_Lead"]
        assert data["is_active"] is False

    def test_roles_cannot_be_empty(self, admin_client, member_user) -> None:
        response = admin_client.put(f"/api/v1/users/{member_user.id}", {"roles": []}, content_type=JSON)

        assert response.json()["error"]["message"] == "At least one role is required"

    def test_email_is_immutable(self, admin_client, member_user) -> None:
        response = admin_client.put(
            f"/api/v1/users/{member_user.id}",
            {"email": "new@example.com"},
            content_type=JSON,
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Email cannot be changed"

    def test_deactivated_user_loses_access(self, admin_client, member_user) -> None:
        client = bearer_client(member_user)
        admin_client.put(f"/api/v1/users/{member_user.id}", {"is_active": False}, content_type=JSON)

        response = client.get("/api/v1/auth/me")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "USER_INACTIVE"


@pytest.mark.django_db
class TestDeleteUser:
    def test_admin_deletes_user(self, admin_client, member_user) -> None:
        response = admin_client.delete(f"/api/v1/users/{member_user.id}")

        assert response.status_code == 200
        assert not User.objects.alive().filter(pk=member_user.id).exists()
        assert User.objects.filter(pk=member_user.id).exists()

    def test_cannot_delete_self(self, admin_client, admin_user) -> None:
        response = admin_client.delete(f"/api/v1/users/{admin_user.id}")

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "You cannot delete your own account"

    def test_member_cannot_delete(self, member_client, admin_user) -> None:
        assert member_client.delete(f"/api/v1/users/{admin_user.id}").status_code == 403
