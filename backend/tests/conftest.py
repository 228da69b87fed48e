"""
Shared pytest fixtures for all tests.

This module provides common fixtures used across multiple test modules.
Individual test modules can override these fixtures if needed.

Factories
---------
Import factories directly from their modules:

    from tests.companies.factories import CompanyFactory
    from tests.accounts.factories import UserFactory
    from tests.projects.factories import ProjectFactory, ProjectGroupFactory

Example usage:

    @pytest.mark.django_db
    def test_something(company):
        user = UserFactory.create(company=company, roles=["Admin"])
        project = ProjectFactory.create(company=company, owner=user)
"""

from collections.abc import Callable
from typing import Any

import pytest
from django.test import Client, RequestFactory

from apps.accounts.tokens import issue_access_token
from apps.core.auth import AuthContext
from apps.realtime import relay


def make_context(user: Any) -> AuthContext:
    """AuthContext exactly as BearerAuth would build it for ``user``."""
    return AuthContext(user=user, company=user.company, roles=user.role_set)


def bearer_client(user: Any) -> Client:
    """Django test client that sends a valid access token for ``user``."""
    return Client(headers={"Authorization": f"Bearer {issue_access_token(user)}"})


@pytest.fixture(autouse=True)
def relay_events():
    """
    In-process relay backend, emptied around every test.

    Events are only delivered after commit; wrap the code under test in
    ``django_capture_on_commit_callbacks(execute=True)`` to observe them.
    """
    relay.reset_backend()
    backend = relay.get_backend()
    backend.clear()
    yield backend
    backend.clear()
    relay.reset_backend()


@pytest.fixture
def request_factory() -> RequestFactory:
    """
    Django request factory for unit testing views.

    Use this when you need to test view functions directly without going through
    the full HTTP stack.
    """
    return RequestFactory()


@pytest.fixture
def api_client() -> Client:
    """
    Django test client for full HTTP request/response cycle tests.

    Example:
        def test_api_returns_200(api_client):
            response = api_client.get("/api/v1/health")
            assert response.status_code == 200
    """
    return Client()


@pytest.fixture
def company(db):
    from tests.companies.factories import CompanyFactory

    return CompanyFactory.create(name="Acme")


@pytest.fixture
def other_company(db):
    from tests.companies.factories import CompanyFactory

    return CompanyFactory.create(name="Globex")


@pytest.fixture
def admin_user(company):
    """Company administrator; sees every record of the tenant."""
    from tests.accounts.factories import UserFactory

    return UserFactory.create(company=company, roles=["Admin"])


@pytest.fixture
def manager_user(company):
    from tests.accounts.factories import UserFactory

    return UserFactory.create(company=company, roles=["Project_Manager"])


@pytest.fixture
def member_user(company):
    """Plain team member; sees only records they take part in."""
    from tests.accounts.factories import UserFactory

    return UserFactory.create(company=company, roles=["Team_Member"])


@pytest.fixture
def admin_ctx(admin_user) -> AuthContext:
    return make_context(admin_user)


@pytest.fixture
def member_ctx(member_user) -> AuthContext:
    return make_context(member_user)


@pytest.fixture
def auth_client() -> Callable[[Any], Client]:
    """
    Factory fixture for authenticated test clients.

    Example:
        def test_list(auth_client, admin_user):
            response = auth_client(admin_user).get("/api/v1/projects")
    """
    return bearer_client


@pytest.fixture
def admin_client(admin_user) -> Client:
    return bearer_client(admin_user)


@pytest.fixture
def member_client(member_user) -> Client:
    return bearer_client(member_user)
