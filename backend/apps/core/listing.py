"""
List queries - search, filters, sort and pagination over a ScopedStore.

Every list endpoint goes through ListQueryBuilder, so tenant scope and
soft-delete exclusion are applied by the store and cannot be overridden by
query parameters.
"""

import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Generic, Literal, TypeVar
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import models
from django.db.models import Count, Q

from apps.core.exceptions import ValidationError
from apps.core.store import ScopedStore
from apps.core.utils import split_csv

M = TypeVar("M", bound=models.Model)

IGNORED_FILTER_VALUES = frozenset({"", "all"})


@dataclass(frozen=True)
class FilterField:
    """
    Declares one filter query parameter.

    Args:
        lookup: ORM lookup applied with the value, e.g. ``status`` or
            ``start_date__gte``.
        many: Accept comma-separated values and filter with ``__in``.
        parse: Converts each raw string value; errors become ValidationError.
        spans_many: The lookup crosses a to-many relation, so rows must be
            de-duplicated.
    """

    lookup: str
    many: bool = False
    parse: Callable[[str], Any] | None = None
    spans_many: bool = False


def parse_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def parse_date(raw: str) -> date:
    return date.fromisoformat(raw.strip())


def parse_uuid(raw: str) -> UUID:
    return UUID(raw.strip())


@dataclass(frozen=True)
class Pagination:
    current_page: int
    total_pages: int
    total_count: int
    per_page: int
    has_more: bool

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Page(Generic[M]):
    data: list[M]
    pagination: Pagination


class ListQueryBuilder(Generic[M]):
    """
    Translates list parameters into a scoped, paginated result.

    Args:
        store: ScopedStore of the listed model.
        search_fields: Fields matched case-insensitively by ``search``.
        filters: Filter parameter name -> FilterField.
        sort_fields: Fields accepted by ``sort``.
        default_sort: Sort used when none is given.
        select_related / prefetch_related: Loaded with every page.
    """

    def __init__(
        self,
        store: ScopedStore[M],
        *,
        search_fields: Sequence[str] = (),
        filters: Mapping[str, FilterField] | None = None,
        sort_fields: Sequence[str] = ("created_at", "updated_at"),
        default_sort: str = "-created_at",
        select_related: Sequence[str] = (),
        prefetch_related: Sequence[str] = (),
    ) -> None:
        self.store = store
        self.search_fields = tuple(search_fields)
        self.filters = dict(filters or {})
        self.sort_fields = frozenset(sort_fields) | {default_sort.lstrip("-")}
        self.default_sort = default_sort
        self.select_related = tuple(select_related)
        self.prefetch_related = tuple(prefetch_related)

    def build(
        self,
        tenant_id: UUID | str,
        *,
        page: int = 1,
        limit: int | None = None,
        search: str | None = None,
        filters: Mapping[str, Any] | None = None,
        sort: str | None = None,
        match: Literal["all", "any"] = "all",
        base: Q | None = None,
    ) -> Page[M]:
        """
        Run the list query.

        ``base`` is an extra condition always ANDed in (e.g. role-based
        visibility or a parent record); it passes through the store's scope
        check like any other query.

        Count and page fetch evaluate the same queryset independently; under
        concurrent writes they may disagree.
        """
        page, limit = self._page_params(page, limit)
        order = self._ordering(sort)

        conditions = self._filter_conditions(filters or {})
        distinct = base is not None or any(
            self.filters[name].spans_many for name in (filters or {}) if name in self.filters
        )

        query = Q()
        if base is not None:
            query &= base
        if conditions:
            query &= self._combine(conditions, match)
        term = (search or "").strip()
        if term and self.search_fields:
            search_q = Q()
            for field in self.search_fields:
                search_q |= Q(**{f"{field}__icontains": term})
            query &= search_q

        qs = self.store.find_scoped(tenant_id, query)
        if distinct:
            qs = qs.distinct()
        qs = qs.order_by(*order)
        if self.select_related:
            qs = qs.select_related(*self.select_related)
        if self.prefetch_related:
            qs = qs.prefetch_related(*self.prefetch_related)

        total_count = qs.count()
        offset = (page - 1) * limit
        rows = qs[offset : offset + limit]

        pagination = Pagination(
            current_page=page,
            total_pages=math.ceil(total_count / limit) if total_count else 0,
            total_count=total_count,
            per_page=limit,
            has_more=page * limit < total_count,
        )
        return Page(data=list(rows), pagination=pagination)

    # --- Steps ---

    def _page_params(self, page: Any, limit: Any) -> tuple[int, int]:
        max_limit = settings.LIST_MAX_LIMIT
        try:
            page = int(page)
        except (TypeError, ValueError):
            raise ValidationError("Page must be a positive integer", details={"field": "page"}) from None
        if page < 1:
            raise ValidationError("Page must be a positive integer", details={"field": "page"})
        if limit is None:
            return page, settings.LIST_DEFAULT_LIMIT
        try:
            limit = int(limit)
        except (TypeError, ValueError):
            raise ValidationError("Limit must be a positive integer", details={"field": "limit"}) from None
        if limit < 1:
            raise ValidationError("Limit must be a positive integer", details={"field": "limit"})
        if limit > max_limit:
            raise ValidationError(f"Limit cannot exceed {max_limit}", details={"field": "limit"})
        return page, limit

    def _ordering(self, sort: str | None) -> list[str]:
        sort = (sort or "").strip() or self.default_sort
        name = sort.lstrip("-")
        if name not in self.sort_fields:
            raise ValidationError(
                f"Cannot sort by '{name}'",
                details={"field": "sort", "allowed": sorted(self.sort_fields)},
            )
        descending = sort.startswith("-")
        return [sort, "-pk" if descending else "pk"]

    def _filter_conditions(self, filters: Mapping[str, Any]) -> list[Q]:
        conditions = []
        for name, value in filters.items():
            filter_field = self.filters.get(name)
            if filter_field is None:
                raise ValidationError(f"Unknown filter '{name}'", details={"field": name})
            condition = self._condition(name, filter_field, value)
            if condition is not None:
                conditions.append(condition)
        return conditions

    def _condition(self, name: str, filter_field: FilterField, value: Any) -> Q | None:
        if value is None:
            return None
        if isinstance(value, str) and value.strip().lower() in IGNORED_FILTER_VALUES:
            return None
        if filter_field.many:
            raw_values = value if isinstance(value, list | tuple) else split_csv(str(value))
            raw_values = [v for v in raw_values if str(v).strip().lower() not in IGNORED_FILTER_VALUES]
            if not raw_values:
                return None
            parsed = [self._parse(name, filter_field, v) for v in raw_values]
            return Q(**{f"{filter_field.lookup}__in": parsed})
        return Q(**{filter_field.lookup: self._parse(name, filter_field, value)})

    def _parse(self, name: str, filter_field: FilterField, value: Any) -> Any:
        if filter_field.parse is None or not isinstance(value, str):
            return value
        try:
            return filter_field.parse(value)
        except (TypeError, ValueError, DjangoValidationError):
            raise ValidationError(
                f"Invalid value for filter '{name}': {value}",
                details={"field": name},
            ) from None

    @staticmethod
    def _combine(conditions: list[Q], match: str) -> Q:
        combined = conditions[0]
        for condition in conditions[1:]:
            combined = combined | condition if match == "any" else combined & condition
        return combined


def status_columns(
    qs: models.QuerySet,
    statuses: Sequence[str],
    limit: int,
    prefetch_related: Sequence[str] = (),
) -> list[dict[str, Any]]:
    """
    Board view: one column per status in vocabulary order, each with the
    full count and at most ``limit`` rows, newest first.
    """
    counts = dict(qs.order_by().values_list("status").annotate(total=Count("pk")))
    return [
        {
            "status": status,
            "count": counts.get(status, 0),
            "items": list(
                qs.filter(status=status).prefetch_related(*prefetch_related).order_by("-created_at", "-pk")[:limit]
            ),
        }
        for status in statuses
    ]
