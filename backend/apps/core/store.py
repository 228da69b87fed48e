"""
Tenant-scoped persistence.

ScopedStore is the only read path services use for tenant data. Every query
it builds is filtered by the caller's company and excludes soft-deleted rows;
a query that tries to widen either filter raises ScopeViolationError instead
of silently returning other tenants' or deleted records.
"""

from collections.abc import Callable, Iterable
from typing import Any, Generic, TypeVar
from uuid import UUID

from django.db import IntegrityError, models, transaction
from django.db.models import Q, QuerySet

from apps.core.exceptions import DuplicateError, NotFoundError, ScopeViolationError
from apps.core.logging import get_logger

logger = get_logger(__name__)

M = TypeVar("M", bound=models.Model)

TENANT_LOOKUPS = frozenset({"company", "company_id", "company__id", "company__pk"})


def _lookup_root(lookup: str) -> str:
    return lookup.split("__", 1)[0]


def _pk_of(value: Any) -> str:
    return str(getattr(value, "pk", value))


class ScopedStore(Generic[M]):
    """
    Scoped reads and guarded writes for one tenant-scoped model.

    Args:
        model: A model with ``company`` and ``deleted_at`` fields.
        guard: MutationGuard run before every create / update.
        hard_delete: Physically remove rows on delete (after cascades).
    """

    def __init__(self, model: type[M], guard=None, hard_delete: bool = False) -> None:
        self.model = model
        self.guard = guard
        self.hard_delete = hard_delete

    @property
    def label(self) -> str:
        return str(self.model._meta.verbose_name).capitalize()

    # --- Reads ---

    def scope(self, tenant_id: UUID | str) -> QuerySet[M]:
        """All active records of the tenant."""
        return self.model.objects.alive().filter(company_id=tenant_id)

    def find_scoped(self, tenant_id: UUID | str, query: dict[str, Any] | Q | None = None) -> QuerySet[M]:
        """
        Scoped queryset narrowed by ``query``.

        Raises:
            ScopeViolationError: If ``query`` names another tenant or touches
                deleted_at other than re-asserting ``deleted_at__isnull=True``.
        """
        qs = self.scope(tenant_id)
        if query is None:
            return qs
        q = Q(**query) if isinstance(query, dict) else query
        self._check_scope(tenant_id, q, negated=False)
        return qs.filter(q)

    def _check_scope(self, tenant_id: UUID | str, q: Q, negated: bool) -> None:
        negated = negated ^ q.negated
        for child in q.children:
            if isinstance(child, Q):
                self._check_scope(tenant_id, child, negated)
                continue
            lookup, value = child
            root = _lookup_root(lookup)
            if root in ("company", "company_id"):
                if lookup not in TENANT_LOOKUPS or negated or _pk_of(value) != str(tenant_id):
                    self._violation(tenant_id, lookup, value)
            elif root == "deleted_at":
                if lookup != "deleted_at__isnull" or value is not True or negated:
                    self._violation(tenant_id, lookup, value)

    def _violation(self, tenant_id: UUID | str, lookup: str, value: Any) -> None:
        logger.error(
            "scope_violation",
            model=self.model.__name__,
            tenant_id=str(tenant_id),
            lookup=lookup,
            value=str(value),
        )
        raise ScopeViolationError(
            details={"model": self.model.__name__, "lookup": lookup},
        )

    def get_scoped(self, tenant_id: UUID | str, pk: UUID | str) -> M:
        """
        Single active record of the tenant.

        Raises:
            NotFoundError: Missing, soft-deleted, or owned by another tenant
        """
        instance = self.scope(tenant_id).filter(pk=pk).first()
        if instance is None:
            raise NotFoundError(f"{self.label} not found")
        return instance

    def get_unscoped(self, pk: UUID | str) -> M:
        """
        Administrative lookup: any tenant, soft-deleted rows included.

        Never reachable from a tenant-facing read path.
        """
        instance = self.model.objects.filter(pk=pk).first()
        if instance is None:
            raise NotFoundError(f"{self.label} not found")
        return instance

    # --- Writes ---

    def create(
        self,
        tenant_id: UUID | str,
        payload: dict[str, Any],
        actor=None,
        prepare: Callable[[M], None] | None = None,
    ) -> M:
        """
        Validate and insert a record owned by the tenant.

        ``prepare`` runs on the unsaved instance after validation, e.g. to
        assign a sequential key.
        """
        cleaned = self.guard.validate_create(tenant_id, payload, actor) if self.guard else dict(payload)
        values, many = self._split_many(cleaned)
        with transaction.atomic():
            instance = self.model(company_id=tenant_id, **values)
            if actor is not None and hasattr(instance, "created_by_id"):
                instance.created_by = actor
            if prepare is not None:
                prepare(instance)
            self._save(instance, force_insert=True)
            for name, related in many.items():
                getattr(instance, name).set(related)
        return instance

    def update(
        self,
        tenant_id: UUID | str,
        pk: UUID | str,
        payload: dict[str, Any],
        prepare: Callable[[M], None] | None = None,
    ) -> M:
        """Validate and apply a partial update to an active record of the tenant."""
        instance = self.get_scoped(tenant_id, pk)
        return self.apply(tenant_id, instance, payload, prepare)

    def apply(
        self,
        tenant_id: UUID | str,
        instance: M,
        payload: dict[str, Any],
        prepare: Callable[[M], None] | None = None,
    ) -> M:
        """Validate and apply a partial update to an already-loaded record."""
        cleaned = self.guard.validate_update(tenant_id, instance, payload) if self.guard else dict(payload)
        values, many = self._split_many(cleaned)
        with transaction.atomic():
            for name, value in values.items():
                setattr(instance, name, value)
            if prepare is not None:
                prepare(instance)
            self._save(instance)
            for name, related in many.items():
                getattr(instance, name).set(related)
        return instance

    def soft_delete(
        self,
        tenant_id: UUID | str,
        pk: UUID | str,
        cascades: Iterable[Callable[[M], None]] = (),
    ) -> M:
        """
        Delete an active record and run its cascades atomically.

        A second delete of the same record raises NotFoundError.
        """
        with transaction.atomic():
            instance = self.get_scoped(tenant_id, pk)
            for cascade in cascades:
                cascade(instance)
            if self.hard_delete:
                instance.hard_delete()
            else:
                instance.soft_delete()
        return instance

    # --- Helpers ---

    def _split_many(self, cleaned: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
        m2m = {f.name for f in self.model._meta.many_to_many}
        values = {k: v for k, v in cleaned.items() if k not in m2m}
        many = {k: v for k, v in cleaned.items() if k in m2m}
        return values, many

    def _save(self, instance: M, **kwargs: Any) -> None:
        try:
            with transaction.atomic():
                instance.save(**kwargs)
        except IntegrityError as exc:
            field, message = self._duplicate_hint()
            logger.warning(
                "unique_constraint_violated",
                model=self.model.__name__,
                error=str(exc),
            )
            raise DuplicateError(message, field=field) from exc

    def _duplicate_hint(self) -> tuple[str | None, str | None]:
        uniques = getattr(self.guard, "unique", ()) if self.guard else ()
        if len(uniques) == 1:
            return uniques[0].field, uniques[0].message
        return None, None
