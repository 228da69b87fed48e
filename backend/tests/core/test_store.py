"""
Tests for ScopedStore.

Tests cover:
- Tenant and soft-delete scoping of every read
- Rejection of queries that try to widen the scope
- Create / update / delete through the guard, including duplicate translation
"""

import pytest
from django.db.models import Q

from apps.companies.models import Organization
from apps.core.exceptions import DuplicateError, NotFoundError, ScopeViolationError
from apps.core.guards import MutationGuard, Unique
from apps.core.store import ScopedStore
from apps.projects.models import Project, ProjectGroup
from tests.companies.factories import OrganizationFactory
from tests.projects.factories import ProjectFactory, ProjectGroupFactory


@pytest.fixture
def store() -> ScopedStore[Project]:
    return ScopedStore(Project)


@pytest.mark.django_db
class TestScopedReads:
    def test_scope_excludes_other_tenants_and_deleted(self, store, company, other_company) -> None:
        mine = ProjectFactory.create(company=company)
        ProjectFactory.create(company=other_company)
        deleted = ProjectFactory.create(company=company)
        deleted.soft_delete()

        assert list(store.scope(company.id)) == [mine]

    def test_find_scoped_narrows(self, store, company) -> None:
        active = ProjectFactory.create(company=company, status=Project.Status.ACTIVE)
        ProjectFactory.create(company=company, status=Project.Status.ON_HOLD)

        found = store.find_scoped(company.id, {"status": Project.Status.ACTIVE})

        assert list(found) == [active]

    def test_reasserting_own_tenant_is_allowed(self, store, company) -> None:
        project = ProjectFactory.create(company=company)

        found = store.find_scoped(company.id, Q(company_id=company.id, deleted_at__isnull=True))

        assert list(found) == [project]

    def test_get_scoped_other_tenant_is_not_found(self, store, company, other_company) -> None:
        foreign = ProjectFactory.create(company=other_company)

        with pytest.raises(NotFoundError):
            store.get_scoped(company.id, foreign.pk)

    def test_get_scoped_deleted_is_not_found(self, store, company) -> None:
        project = ProjectFactory.create(company=company)
        project.soft_delete()

        with pytest.raises(NotFoundError) as exc_info:
            store.get_scoped(company.id, project.pk)

        assert exc_info.value.message == "Project not found"

    def test_get_unscoped_sees_everything(self, store, other_company) -> None:
        project = ProjectFactory.create(company=other_company)
        project.soft_delete()

        assert store.get_unscoped(project.pk) == project


@pytest.mark.django_db
class TestScopeViolations:
    @pytest.mark.parametrize(
        "query",
        [
            {"deleted_at__isnull": False},
            {"deleted_at__gte": "2020-01-01"},
            Q(deleted_at__isnull=True) | ~Q(deleted_at__isnull=True),
            {"company__name": "Globex"},
        ],
    )
    def test_widening_queries_raise(self, store, company, query) -> None:
        with pytest.raises(ScopeViolationError):
            store.find_scoped(company.id, query)

    def test_other_tenant_id_raises(self, store, company, other_company) -> None:
        with pytest.raises(ScopeViolationError) as exc_info:
            store.find_scoped(company.id, {"company_id": other_company.id})

        assert exc_info.value.details == {"model": "Project", "lookup": "company_id"}

    def test_nested_other_tenant_raises(self, store, company, other_company) -> None:
        query = Q(status="Active") & (Q(title="x") | Q(company=other_company))

        with pytest.raises(ScopeViolationError):
            store.find_scoped(company.id, query)

    def test_violation_is_server_error(self) -> None:
        assert ScopeViolationError.status_code == 500
        assert ScopeViolationError.code == "SERVER_ERROR"


@pytest.mark.django_db
class TestScopedWrites:
    def test_create_assigns_tenant_and_actor(self, company, admin_user) -> None:
        store = ScopedStore(Organization, guard=MutationGuard(Organization, required=["name"]))

        organization = store.create(company.id, {"name": "  Research  "}, actor=admin_user)

        assert organization.company_id == company.id
        assert organization.created_by == admin_user
        assert organization.name == "Research"

    def test_create_runs_prepare_before_insert(self, company) -> None:
        store = ScopedStore(Organization)

        organization = store.create(
            company.id,
            {"name": "Research"},
            prepare=lambda obj: setattr(obj, "description", "prepared"),
        )

        organization.refresh_from_db()
        assert organization.description == "prepared"

    def test_integrity_error_becomes_duplicate(self, company) -> None:
        OrganizationFactory.create(company=company, name="Research")
        store = ScopedStore(Organization, guard=MutationGuard(Organization, unique=[Unique("name", "Taken")]))

        # Bypass the guard check to hit the database constraint
        instance = Organization(company=company, name="RESEARCH")
        with pytest.raises(DuplicateError) as exc_info:
            store._save(instance, force_insert=True)

        assert exc_info.value.field == "name"
        assert exc_info.value.message == "Taken"

    def test_update_other_tenant_is_not_found(self, company, other_company) -> None:
        foreign = OrganizationFactory.create(company=other_company)

        with pytest.raises(NotFoundError):
            ScopedStore(Organization).update(company.id, foreign.pk, {"name": "Mine now"})

        foreign.refresh_from_db()
        assert foreign.name != "Mine now"

    def test_soft_delete_twice_is_not_found(self, company) -> None:
        store = ScopedStore(Organization)
        organization = OrganizationFactory.create(company=company)

        store.soft_delete(company.id, organization.pk)

        with pytest.raises(NotFoundError):
            store.soft_delete(company.id, organization.pk)
        assert Organization.objects.filter(pk=organization.pk).exists()

    def test_hard_delete_runs_cascades_first(self, company) -> None:
        store = ScopedStore(ProjectGroup, hard_delete=True)
        group = ProjectGroupFactory.create(company=company)
        seen = []

        store.soft_delete(company.id, group.pk, cascades=[lambda g: seen.append(g.pk)])

        assert seen == [group.pk]
        assert not ProjectGroup.objects.filter(pk=group.pk).exists()
