"""
Companies services - tenant administration and organizations.

Companies are not owned by a tenant; each company is its own scope. Super
admins operate at platform level and see every active company, everybody
else sees only the company they belong to.
"""

from typing import Any
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.constants import ADMIN_ROLES, SUPER_ADMIN_ROLES
from apps.companies.models import Company, Organization
from apps.companies.schemas import CompanyOut, OrganizationOut
from apps.core.auth import AuthContext
from apps.core.exceptions import ValidationError
from apps.core.guards import MutationGuard, Unique
from apps.core.listing import ListQueryBuilder, Page
from apps.core.logging import get_logger
from apps.core.resources import Resource
from apps.core.store import ScopedStore
from apps.realtime import relay

logger = get_logger(__name__)


class CompanyStore(ScopedStore[Company]):
    """ScopedStore where the tenant is the company itself; ``None`` means all companies."""

    def scope(self, tenant_id: UUID | str | None) -> QuerySet[Company]:
        qs = Company.objects.alive()
        return qs if tenant_id is None else qs.filter(pk=tenant_id)

    def create(self, tenant_id, payload, actor=None, prepare=None) -> Company:
        cleaned = self.guard.validate_create(tenant_id, payload, actor)
        instance = Company(**cleaned)
        self._save(instance, force_insert=True)
        return instance


class CompanyService:
    guard = MutationGuard(
        Company,
        required=["name"],
        messages={"name": "Company name is required"},
    )

    def __init__(self) -> None:
        self.store = CompanyStore(Company, guard=self.guard)
        self.builder = ListQueryBuilder(
            self.store,
            search_fields=("name", "domain"),
            sort_fields=("name", "created_at", "updated_at"),
            default_sort="name",
        )

    @staticmethod
    def _scope_of(ctx: AuthContext) -> UUID | None:
        return None if ctx.has_any_role(*SUPER_ADMIN_ROLES) else ctx.company_id

    def list_page(self, ctx: AuthContext, **params: Any) -> Page[Company]:
        params.pop("filters", None)
        params.pop("base", None)
        return self.builder.build(self._scope_of(ctx), **params)

    def get(self, ctx: AuthContext, pk: UUID | str) -> Company:
        return self.store.get_scoped(self._scope_of(ctx), pk)

    def create(self, ctx: AuthContext, payload: dict[str, Any]) -> Company:
        ctx.require_roles(*SUPER_ADMIN_ROLES)
        with transaction.atomic():
            company = self.store.create(None, payload, actor=ctx.user)
        logger.info("company_created", record_id=str(company.pk))
        return company

    def update(self, ctx: AuthContext, pk: UUID | str, payload: dict[str, Any]) -> Company:
        ctx.require_roles(*ADMIN_ROLES)
        with transaction.atomic():
            company = self.get(ctx, pk)
            company = self.store.apply(company.pk, company, payload)
            relay.emit(
                "company:updated",
                company.pk,
                [relay.company_room(company.pk)],
                CompanyOut.from_orm(company).model_dump(mode="json"),
            )
        logger.info("company_updated", record_id=str(company.pk), fields=sorted(payload))
        return company

    def delete(self, ctx: AuthContext, pk: UUID | str) -> Company:
        ctx.require_roles(*SUPER_ADMIN_ROLES)
        if str(pk) == str(ctx.company_id):
            raise ValidationError("You cannot delete your own company", details={"field": "id"})
        with transaction.atomic():
            company = self.store.soft_delete(None, pk)
            relay.emit("company:deleted", company.pk, [relay.company_room(company.pk)], {"id": str(pk)})
        logger.info("company_deleted", record_id=str(pk))
        return company


class OrganizationResource(Resource[Organization]):
    model = Organization
    event_prefix = "organization"
    out_schema = OrganizationOut
    guard = MutationGuard(
        Organization,
        required=["name"],
        unique=[Unique("name", "An organization with this name already exists")],
        messages={"name": "Organization name is required"},
    )
    search_fields = ("name", "description")
    sort_fields = ("name", "created_at", "updated_at")
    default_sort = "name"
    create_roles = ADMIN_ROLES
    update_roles = ADMIN_ROLES
    delete_roles = ADMIN_ROLES


company_service = CompanyService()
organization_resource = OrganizationResource()
