"""
Tests for company and organization endpoints.
"""

import pytest

from apps.companies.models import Company, Organization
from tests.accounts.factories import UserFactory
from tests.companies.factories import OrganizationFactory
from tests.conftest import bearer_client

JSON = "application/json"


@pytest.fixture
def super_admin(company):
    return UserFactory.create(company=company, roles=["Super_Admin"])


@pytest.fixture
def super_client(super_admin):
    return bearer_client(super_admin)


@pytest.mark.django_db
class TestCompanies:
    def test_regular_users_see_only_their_company(self, member_client, company, other_company) -> None:
        response = member_client.get("/api/v1/companies")

        assert [c["id"] for c in response.json()["data"]] == [str(company.id)]

    def test_super_admin_sees_every_active_company(self, super_client, company, other_company) -> None:
        gone = Company.objects.create(name="Defunct")
        gone.soft_delete()

        response = super_client.get("/api/v1/companies")

        assert {c["id"] for c in response.json()["data"]} == {str(company.id), str(other_company.id)}

    def test_current_company(self, member_client, company) -> None:
        data = member_client.get("/api/v1/companies/current").json()["data"]

        assert data["id"] == str(company.id)
        assert data["default_role"] == "Team_Member"

    def test_other_company_is_not_found(self, admin_client, other_company) -> None:
        assert admin_client.get(f"/api/v1/companies/{other_company.id}").status_code == 404

    def test_super_admin_creates_company(self, super_client) -> None:
        response = super_client.post(
            "/api/v1/companies",
            {"name": "  Initech ", "domain": "initech.com", "default_role": "Client"},
            content_type=JSON,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["name"] == "Initech"
        assert data["default_role"] == "Client"

    def test_admin_cannot_create_company(self, admin_client) -> None:
        response = admin_client.post("/api/v1/companies", {"name": "Initech"}, content_type=JSON)

        assert response.status_code == 403

    def test_name_required(self, super_client) -> None:
        response = super_client.post("/api/v1/companies", {"domain": "x.com"}, content_type=JSON)

        assert response.json()["error"]["message"] == "Company name is required"

    def test_admin_updates_own_company(
        self, admin_client, company, relay_events, django_capture_on_commit_callbacks
    ) -> None:
        with django_capture_on_commit_callbacks(execute=True):
            response = admin_client.put(
                f"/api/v1/companies/{company.id}",
                {"allow_user_registration": True, "default_role": "Team_Lead"},
                content_type=JSON,
            )

        data = response.json()["data"]
        assert data["allow_user_registration"] is True
        assert data["default_role"] == "Team_Lead"
        [event] = relay_events.of_type("company:updated")
        assert event.room_ids == (f"company:{company.id}",)

    def test_member_cannot_update_company(self, member_client, company) -> None:
        response = member_client.put(f"/api/v1/companies/{company.id}", {"name": "Mine"}, content_type=JSON)

        assert response.status_code == 403

    def test_invalid_default_role(self, admin_client, company) -> None:
        response = admin_client.put(
            f"/api/v1/companies/{company.id}",
            {"default_role": "Wizard"},
            content_type=JSON,
        )

        assert response.status_code == 400
        assert "Team_Member" in response.json()["error"]["details"]["allowed"]

    def test_super_admin_deletes_other_company(self, super_client, other_company) -> None:
        response = super_client.delete(f"/api/v1/companies/{other_company.id}")

        assert response.status_code == 200
        other_company.refresh_from_db()
        assert other_company.is_deleted

    def test_cannot_delete_own_company(self, super_client, company) -> None:
        response = super_client.delete(f"/api/v1/companies/{company.id}")

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "You cannot delete your own company"

    def test_users_of_deleted_company_are_locked_out(self, super_client, other_company) -> None:
        stranded = bearer_client(UserFactory.create(company=other_company))
        super_client.delete(f"/api/v1/companies/{other_company.id}")

        response = stranded.get("/api/v1/auth/me")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "USER_NOT_FOUND"


@pytest.mark.django_db
class TestOrganizations:
    def test_admin_creates_organization(self, admin_client, company) -> None:
        response = admin_client.post(
            "/api/v1/organizations",
            {"name": "Engineering", "description": "Product teams"},
            content_type=JSON,
        )

        assert response.status_code == 201
        assert response.json()["data"]["company_id"] == str(company.id)

    def test_name_unique_per_company(self, admin_client, company, other_company) -> None:
        OrganizationFactory.create(company=company, name="Engineering")
        OrganizationFactory.create(company=other_company, name="Sales")

        duplicate = admin_client.post("/api/v1/organizations", {"name": "ENGINEERING"}, content_type=JSON)
        reused = admin_client.post("/api/v1/organizations", {"name": "Sales"}, content_type=JSON)

        error = duplicate.json()["error"]
        assert error["code"] == "DUPLICATE_FIELD"
        assert error["message"] == "An organization with this name already exists"
        assert reused.status_code == 201

    def test_members_read_but_cannot_write(self, member_client, company) -> None:
        organization = OrganizationFactory.create(company=company)

        listed = member_client.get("/api/v1/organizations").json()["data"]
        updated = member_client.put(
            f"/api/v1/organizations/{organization.pk}",
            {"name": "Renamed"},
            content_type=JSON,
        )
        deleted = member_client.delete(f"/api/v1/organizations/{organization.pk}")

        assert [o["id"] for o in listed] == [str(organization.pk)]
        assert updated.status_code == 403
        assert deleted.status_code == 403

    def test_delete_then_reuse_name(self, admin_client, company) -> None:
        organization = OrganizationFactory.create(company=company, name="Support")

        assert admin_client.delete(f"/api/v1/organizations/{organization.pk}").status_code == 200
        assert admin_client.get(f"/api/v1/organizations/{organization.pk}").status_code == 404
        again = admin_client.post("/api/v1/organizations", {"name": "Support"}, content_type=JSON)

        assert again.status_code == 201
        assert Organization.objects.filter(name="Support").count() == 2
