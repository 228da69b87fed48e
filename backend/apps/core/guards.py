"""
Write-time validation for tenant-scoped resources.

MutationGuard checks a create or update payload in a fixed order and stops
at the first failure:

    1. immutable fields (update only)
    2. required fields, vocabularies (model field choices), field validators
    3. references (same tenant, not soft-deleted)
    4. uniqueness (case-insensitive, active records of the tenant)

It returns the cleaned values keyed by model field name, with references
replaced by model instances, ready for ScopedStore to assign.
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from django.core.exceptions import FieldDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import models
from django.utils.dateparse import parse_datetime

from apps.core.exceptions import (
    DuplicateError,
    ImmutableFieldError,
    InvalidReferenceError,
    ValidationError,
)

IMMUTABLE_FIELDS = frozenset({"id", "company", "company_id", "created_by", "created_by_id", "created_at"})

# Maintained by the store; updated_at is dropped when echoed, deleted_at is rejected
IGNORED_FIELDS = frozenset({"updated_at"})
SYSTEM_FIELDS = frozenset({"deleted_at"})

Validator = Callable[[dict[str, Any], models.Model | None], None]


@dataclass(frozen=True)
class Reference:
    """
    A payload key that names another record of the same tenant.

    Args:
        field: Model field (ForeignKey or ManyToManyField) receiving the record(s).
        model: Referenced model; must be tenant-scoped.
        key: Payload key, defaults to ``<field>_id``.
        many: Payload value is a list of ids.
        label: Name used in error messages.
    """

    field: str
    model: type[models.Model]
    key: str | None = None
    many: bool = False
    label: str | None = None

    @property
    def payload_key(self) -> str:
        return self.key or f"{self.field}_id"

    @property
    def display(self) -> str:
        return self.label or self.field.replace("_", " ")


@dataclass(frozen=True)
class Unique:
    """Field whose value must be unique (case-insensitive) among the tenant's active records."""

    field: str
    message: str | None = None


def current_value(values: dict[str, Any], existing: models.Model | None, name: str) -> Any:
    """Value after the write: payload wins, otherwise the stored value."""
    if name in values:
        return values[name]
    if existing is not None:
        return getattr(existing, name, None)
    return None


def date_range(start: str, end: str, message: str | None = None) -> Validator:
    """Validator: ``end`` may not precede ``start`` when both are set."""

    def check(values: dict[str, Any], existing: models.Model | None) -> None:
        start_value = current_value(values, existing, start)
        end_value = current_value(values, existing, end)
        if start_value and end_value and end_value < start_value:
            raise ValidationError(
                message or f"{end.replace('_', ' ').capitalize()} cannot be before {start.replace('_', ' ')}",
                details={"field": end},
            )

    return check


def fixed(field: str, message: str) -> Validator:
    """Consistency check: ``field`` is set on create and never changes afterwards."""

    def check(cleaned: dict[str, Any], existing: models.Model | None) -> None:
        if existing is None or field not in cleaned:
            return
        if _pk_of(cleaned[field]) != _pk_of(existing.serializable_value(field)):
            raise ValidationError(message, details={"field": f"{field}_id"})

    return check


class MutationGuard:
    """
    Validates payloads for one model.

    Args:
        model: The tenant-scoped model being written.
        required: Fields that must be present and non-blank on create and
            may not be blanked on update.
        references: Reference declarations for FK / M2M payload keys.
        unique: Unique declarations.
        validators: Callables ``(values, existing)`` raising ValidationError,
            run with the required and vocabulary checks.
        consistency: Callables ``(cleaned, existing)`` run after references
            resolve, for cross-reference rules (e.g. same project). They
            raise InvalidReferenceError.
        read_only: Model fields clients may never set (workflow state,
            derived counters, generated keys).
        messages: Overrides for "<field> is required" messages.
    """

    def __init__(
        self,
        model: type[models.Model],
        *,
        required: Sequence[str] = (),
        references: Sequence[Reference] = (),
        unique: Sequence[Unique] = (),
        validators: Sequence[Validator] = (),
        consistency: Sequence[Validator] = (),
        read_only: Iterable[str] = (),
        messages: dict[str, str] | None = None,
    ) -> None:
        self.model = model
        self.required = tuple(required)
        self.references = tuple(references)
        self.unique = tuple(unique)
        self.validators = tuple(validators)
        self.consistency = tuple(consistency)
        self.read_only = frozenset(read_only)
        self.messages = messages or {}
        self._references_by_key = {ref.payload_key: ref for ref in self.references}

    # --- Public API ---

    def validate_create(self, tenant_id: UUID | str, payload: dict[str, Any], actor=None) -> dict[str, Any]:
        """Check a create payload; returns cleaned values keyed by model field."""
        values = self._known_values(payload)
        self._check_required(values, creating=True)
        self._check_fields(values, None)
        cleaned = self._resolve_references(tenant_id, values)
        for check in self.consistency:
            check(cleaned, None)
        self._check_unique(tenant_id, cleaned, None)
        return cleaned

    def validate_update(self, tenant_id: UUID | str, existing: models.Model, payload: dict[str, Any]) -> dict[str, Any]:
        """Check a partial update payload against the stored record."""
        payload = self._strip_immutable(existing, payload)
        values = self._known_values(payload)
        self._check_required(values, creating=False)
        self._check_fields(values, existing)
        cleaned = self._resolve_references(tenant_id, values)
        for check in self.consistency:
            check(cleaned, existing)
        self._check_unique(tenant_id, cleaned, existing)
        return cleaned

    # --- Steps ---

    def _strip_immutable(self, existing: models.Model, payload: dict[str, Any]) -> dict[str, Any]:
        remaining = {}
        for key, value in payload.items():
            if key in IGNORED_FIELDS:
                continue
            if key in IMMUTABLE_FIELDS or self._is_generated(key):
                attname = key if hasattr(existing, key) else f"{key}_id"
                stored = getattr(existing, attname, None)
                if value is not None and not _same_value(value, stored):
                    raise ImmutableFieldError(f"{key} cannot be changed", field=key)
                continue
            remaining[key] = value
        return remaining

    def _is_generated(self, key: str) -> bool:
        try:
            field = self.model._meta.get_field(key)
        except FieldDoesNotExist:
            return False
        return not field.editable and not field.primary_key and key not in SYSTEM_FIELDS

    def _known_values(self, payload: dict[str, Any]) -> dict[str, Any]:
        values = {}
        for key, value in payload.items():
            if key in SYSTEM_FIELDS or key in self.read_only:
                raise ValidationError(f"{key} cannot be set directly", details={"field": key})
            if key in self._references_by_key or self._concrete_field(key) is not None:
                values[key] = value
            else:
                raise ValidationError(f"Unknown field: {key}", details={"field": key})
        return values

    def _check_required(self, values: dict[str, Any], creating: bool) -> None:
        for name in self.required:
            if not creating and name not in values:
                continue
            value = values.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                label = name.replace("_", " ").capitalize()
                raise ValidationError(
                    self.messages.get(name, f"{label} is required"),
                    details={"field": name},
                )

    def _check_fields(self, values: dict[str, Any], existing: models.Model | None) -> None:
        for key, value in list(values.items()):
            field = self._concrete_field(key)
            if field is None:
                continue
            if value is None:
                if not field.null:
                    raise ValidationError(
                        f"{key.replace('_', ' ').capitalize()} cannot be null",
                        details={"field": key},
                    )
                continue
            if isinstance(value, str) and isinstance(field, models.CharField | models.TextField):
                value = value.strip()
                values[key] = value
            if field.choices and value not in {choice for choice, _ in field.flatchoices}:
                allowed = [choice for choice, _ in field.flatchoices]
                raise ValidationError(
                    f"Invalid {key.replace('_', ' ')}: {value}",
                    details={"field": key, "allowed": allowed},
                )
            try:
                python_value = field.to_python(value)
                field.run_validators(python_value)
            except DjangoValidationError as exc:
                raise ValidationError(
                    f"Invalid {key.replace('_', ' ')}: {'; '.join(exc.messages)}",
                    details={"field": key},
                ) from None
            max_length = getattr(field, "max_length", None)
            if max_length and isinstance(python_value, str) and len(python_value) > max_length:
                raise ValidationError(
                    f"{key.replace('_', ' ').capitalize()} cannot exceed {max_length} characters",
                    details={"field": key},
                )
            values[key] = python_value
        for check in self.validators:
            check(values, existing)

    def _resolve_references(self, tenant_id: UUID | str, values: dict[str, Any]) -> dict[str, Any]:
        from apps.core.store import ScopedStore

        cleaned = {}
        for key, value in values.items():
            ref = self._references_by_key.get(key)
            if ref is None:
                cleaned[key] = value
                continue
            store = ScopedStore(ref.model)
            if ref.many:
                ids = list(dict.fromkeys(_pk_of(v) for v in value or []))
                found = list(store.find_scoped(tenant_id, {"pk__in": _as_uuids(ids, ref)}))
                if len(found) != len(ids):
                    missing = sorted(set(ids) - {str(obj.pk) for obj in found})
                    raise InvalidReferenceError(
                        f"Invalid {ref.display}",
                        field=key,
                        details={"missing": missing},
                    )
                cleaned[ref.field] = found
            elif value is None:
                cleaned[ref.field] = None
            else:
                target = store.find_scoped(tenant_id, {"pk": _as_uuids([_pk_of(value)], ref)[0]}).first()
                if target is None:
                    raise InvalidReferenceError(f"{ref.display.capitalize()} not found", field=key)
                cleaned[ref.field] = target
        return cleaned

    def _check_unique(self, tenant_id: UUID | str, cleaned: dict[str, Any], existing: models.Model | None) -> None:
        from apps.core.store import ScopedStore

        store = ScopedStore(self.model)
        for rule in self.unique:
            if rule.field not in cleaned or cleaned[rule.field] in (None, ""):
                continue
            qs = store.find_scoped(tenant_id, {f"{rule.field}__iexact": cleaned[rule.field]})
            if existing is not None:
                qs = qs.exclude(pk=existing.pk)
            if qs.exists():
                label = str(self.model._meta.verbose_name)
                raise DuplicateError(
                    rule.message or f"A {label} with this {rule.field} already exists",
                    field=rule.field,
                )

    def _concrete_field(self, key: str) -> models.Field | None:
        if key in self._references_by_key:
            return None
        try:
            field = self.model._meta.get_field(key)
        except FieldDoesNotExist:
            return None
        if not getattr(field, "concrete", False) or field.is_relation or field.primary_key:
            return None
        if not field.editable or key in IMMUTABLE_FIELDS:
            return None
        return field


def _same_value(value: Any, stored: Any) -> bool:
    if isinstance(stored, datetime) and isinstance(value, str):
        value = parse_datetime(value)
    if isinstance(stored, datetime) and isinstance(value, datetime):
        return value == stored
    return _pk_of(value) == _pk_of(stored)


def _pk_of(value: Any) -> str | None:
    if value is None:
        return None
    return str(getattr(value, "pk", value))


def _as_uuids(ids: list[str | None], ref: Reference) -> list[UUID]:
    try:
        return [UUID(str(i)) for i in ids]
    except ValueError:
        raise InvalidReferenceError(f"Invalid {ref.display}", field=ref.payload_key) from None
