"""
Core models - shared base classes and utilities.
"""

from django.db import models
from django.utils import timezone
from uuid6 import uuid7


class TimestampedModel(models.Model):
    """
    Abstract base model with created_at/updated_at timestamps.

    All business entities should inherit from this or TenantScopedModel.
    """

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class SoftDeleteQuerySet(models.QuerySet):
    """
    QuerySet with explicit soft-delete filters.

    Nothing is filtered implicitly: callers choose alive() or dead(), and
    tenant-facing reads go through apps.core.store.ScopedStore, which always
    applies alive().
    """

    def alive(self) -> "SoftDeleteQuerySet":
        """Records without a deletion marker."""
        return self.filter(deleted_at__isnull=True)

    def dead(self) -> "SoftDeleteQuerySet":
        """Soft-deleted records only."""
        return self.filter(deleted_at__isnull=False)

    def soft_delete(self) -> int:
        """Mark every record in the queryset as deleted. Returns the row count."""
        now = timezone.now()
        return self.update(deleted_at=now, updated_at=now)


SoftDeleteManager = models.Manager.from_queryset(SoftDeleteQuerySet)


class SoftDeleteMixin(models.Model):
    """
    Adds a nullable deleted_at marker plus soft_delete/restore/hard_delete.

    Must come before TimestampedModel in the MRO so that soft_delete()
    can bump updated_at through update_fields.
    """

    deleted_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Timestamp when the record was soft-deleted. NULL = active.",
    )

    class Meta:
        abstract = True

    @property
    def is_deleted(self) -> bool:
        """Check if record is soft-deleted."""
        return self.deleted_at is not None

    def soft_delete(self, update_timestamp: bool = True) -> None:
        """Set deleted_at to now; never removes the row."""
        self.deleted_at = timezone.now()
        if update_timestamp:
            self.save(update_fields=["deleted_at", "updated_at"])
        else:
            # save() would let auto_now overwrite updated_at
            type(self)._base_manager.filter(pk=self.pk).update(deleted_at=self.deleted_at)

    def restore(self) -> None:
        """Clear the deletion marker."""
        self.deleted_at = None
        self.save(update_fields=["deleted_at", "updated_at"])

    def hard_delete(self) -> None:
        """Permanently remove the row."""
        super().delete()


class TenantScopedModel(SoftDeleteMixin, TimestampedModel):
    """
    Abstract base model for all company-scoped entities.

    Provides:
    - UUIDv7 primary key (time-ordered, usable as a stable sort tie-breaker)
    - Mandatory, immutable company FK (the tenant)
    - created_by provenance
    - Soft delete and timestamps

    Usage:
        class Project(TenantScopedModel):
            title = models.CharField(max_length=200)
    """

    id = models.UUIDField(primary_key=True, default=uuid7, editable=False)
    company = models.ForeignKey(
        "companies.Company",
        on_delete=models.CASCADE,
        related_name="%(class)s_set",
    )
    created_by = models.ForeignKey(
        "accounts.User",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )

    objects = SoftDeleteManager()

    class Meta:
        abstract = True
        ordering = ["-created_at"]
