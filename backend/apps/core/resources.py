"""
Generic list-and-mutate resource.

A Resource composes a ScopedStore, a MutationGuard, a ListQueryBuilder and
the real-time relay for one model. Entity services subclass it, declare
their fields as class attributes and override the hooks they need:

    class MilestoneResource(Resource[Milestone]):
        model = Milestone
        event_prefix = "milestone"
        guard = MutationGuard(Milestone, required=["name"], ...)
        search_fields = ("name",)

Routers call list_page / get / create / update / delete with the request's
AuthContext; tenant scope always comes from that context.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any, ClassVar, Generic, TypeVar
from uuid import UUID

from django.db import models, transaction
from django.db.models import Q

from apps.core.auth import AuthContext
from apps.core.exceptions import NotFoundError
from apps.core.guards import MutationGuard
from apps.core.listing import FilterField, ListQueryBuilder, Page
from apps.core.logging import get_logger
from apps.core.store import ScopedStore
from apps.realtime import relay

logger = get_logger(__name__)

M = TypeVar("M", bound=models.Model)


class Resource(Generic[M]):
    model: ClassVar[type[models.Model]]
    guard: ClassVar[MutationGuard | None] = None
    event_prefix: ClassVar[str]
    out_schema: ClassVar[Any] = None

    # Listing
    search_fields: ClassVar[Sequence[str]] = ()
    filters: ClassVar[Mapping[str, FilterField]] = {}
    sort_fields: ClassVar[Sequence[str]] = ("created_at", "updated_at")
    default_sort: ClassVar[str] = "-created_at"
    select_related: ClassVar[Sequence[str]] = ()
    prefetch_related: ClassVar[Sequence[str]] = ()

    # Deletion
    hard_delete: ClassVar[bool] = False

    # Visibility; when False the restriction applies to managers too
    managers_see_all: ClassVar[bool] = True

    # Role gates; None means any authenticated principal
    create_roles: ClassVar[frozenset[str] | None] = None
    update_roles: ClassVar[frozenset[str] | None] = None
    delete_roles: ClassVar[frozenset[str] | None] = None

    def __init__(self) -> None:
        self.store: ScopedStore[M] = ScopedStore(self.model, guard=self.guard, hard_delete=self.hard_delete)
        self.builder: ListQueryBuilder[M] = ListQueryBuilder(
            self.store,
            search_fields=self.search_fields,
            filters=self.filters,
            sort_fields=self.sort_fields,
            default_sort=self.default_sort,
            select_related=self.select_related,
            prefetch_related=self.prefetch_related,
        )

    @property
    def label(self) -> str:
        return self.store.label

    # --- Hooks ---

    def visibility(self, ctx: AuthContext) -> Q | None:
        """Extra read restriction for principals without a manager role."""
        return None

    def rooms(self, instance: M) -> list[str]:
        """Relay rooms informed about changes to ``instance``."""
        return [relay.company_room(instance.company_id)]

    def serialize(self, instance: M) -> dict[str, Any]:
        if self.out_schema is None:
            return {"id": str(instance.pk)}
        return self.out_schema.from_orm(instance).model_dump(mode="json")

    def before_create(self, instance: M, ctx: AuthContext) -> None:
        """Runs on the validated, unsaved instance."""

    def after_create(self, instance: M, ctx: AuthContext) -> None:
        """Runs inside the create transaction after save."""

    def before_update(self, instance: M, ctx: AuthContext) -> None:
        """Runs on the instance after the changes are applied, before save."""

    def after_update(self, instance: M, previous: dict[str, Any], ctx: AuthContext) -> None:
        """Runs inside the update transaction; ``previous`` holds the old field values."""

    def delete_cascades(self, ctx: AuthContext) -> list[Callable[[M], None]]:
        """Callables run on the record inside the delete transaction."""
        return []

    def check_update(self, instance: M, ctx: AuthContext) -> None:
        """Per-record authorization for update; raise PermissionDeniedError to refuse."""

    def check_delete(self, instance: M, ctx: AuthContext) -> None:
        """Per-record authorization for delete; raise PermissionDeniedError to refuse."""

    # --- Reads ---

    def list_page(
        self,
        ctx: AuthContext,
        *,
        page: int = 1,
        limit: int | None = None,
        search: str | None = None,
        filters: Mapping[str, Any] | None = None,
        sort: str | None = None,
        match: str = "all",
        base: Q | None = None,
    ) -> Page[M]:
        restriction = self._restriction(ctx)
        if base is not None:
            restriction = base if restriction is None else restriction & base
        return self.builder.build(
            ctx.company_id,
            page=page,
            limit=limit,
            search=search,
            filters=filters,
            sort=sort,
            match=match,
            base=restriction,
        )

    def visible(self, ctx: AuthContext, query: Q | dict[str, Any] | None = None):
        """Scoped queryset further limited by the principal's visibility."""
        qs = self.store.find_scoped(ctx.company_id, query)
        restriction = self._restriction(ctx)
        if restriction is not None:
            qs = qs.filter(pk__in=self.store.find_scoped(ctx.company_id, restriction).values("pk"))
        return qs

    def get(self, ctx: AuthContext, pk: UUID | str) -> M:
        """
        Raises:
            NotFoundError: Missing, deleted, other tenant, or not visible to the principal
        """
        instance = self.store.get_scoped(ctx.company_id, pk)
        restriction = self._restriction(ctx)
        if restriction is not None and not self.store.find_scoped(ctx.company_id, restriction & Q(pk=pk)).exists():
            raise NotFoundError(f"{self.label} not found")
        return instance

    # --- Writes ---

    def create(self, ctx: AuthContext, payload: dict[str, Any]) -> M:
        if self.create_roles is not None:
            ctx.require_roles(*self.create_roles)
        with transaction.atomic():
            instance = self.store.create(
                ctx.company_id,
                payload,
                actor=ctx.user,
                prepare=lambda obj: self.before_create(obj, ctx),
            )
            self.after_create(instance, ctx)
            self.emit(f"{self.event_prefix}:created", instance, self.serialize(instance))
        logger.info(f"{self.event_prefix}_created", record_id=str(instance.pk))
        return instance

    def update(self, ctx: AuthContext, pk: UUID | str, payload: dict[str, Any]) -> M:
        if self.update_roles is not None:
            ctx.require_roles(*self.update_roles)
        with transaction.atomic():
            instance = self.get(ctx, pk)
            self.check_update(instance, ctx)
            previous = {f.attname: getattr(instance, f.attname) for f in instance._meta.concrete_fields}
            instance = self.store.apply(
                ctx.company_id,
                instance,
                payload,
                prepare=lambda obj: self.before_update(obj, ctx),
            )
            self.after_update(instance, previous, ctx)
            self.emit(f"{self.event_prefix}:updated", instance, self.serialize(instance))
        logger.info(
            f"{self.event_prefix}_updated",
            record_id=str(instance.pk),
            fields=sorted(payload),
        )
        return instance

    def delete(self, ctx: AuthContext, pk: UUID | str) -> M:
        if self.delete_roles is not None:
            ctx.require_roles(*self.delete_roles)
        with transaction.atomic():
            instance = self.get(ctx, pk)
            self.check_delete(instance, ctx)
            rooms = self.rooms(instance)
            instance = self.store.soft_delete(ctx.company_id, pk, cascades=self.delete_cascades(ctx))
            relay.emit(f"{self.event_prefix}:deleted", ctx.company_id, rooms, {"id": str(pk)})
        logger.info(f"{self.event_prefix}_deleted", record_id=str(pk), hard=self.hard_delete)
        return instance

    def emit(self, event_type: str, instance: M, payload: dict[str, Any]) -> None:
        relay.emit(event_type, instance.company_id, self.rooms(instance), payload)

    def _restriction(self, ctx: AuthContext) -> Q | None:
        if ctx.is_manager and self.managers_see_all:
            return None
        return self.visibility(ctx)


def list_response(resource: Resource, ctx: AuthContext, params, base: Q | None = None) -> dict[str, Any]:
    """Run a list endpoint's ListParams through ``resource`` and wrap the page."""
    page = resource.list_page(
        ctx,
        page=params.page,
        limit=params.limit,
        search=params.search,
        filters=params.filters(),
        sort=params.sort,
        match=params.match,
        base=base,
    )
    return {"success": True, "data": page.data, "pagination": page.pagination.as_dict()}
