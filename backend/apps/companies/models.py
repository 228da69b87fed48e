"""
Companies models - multi-tenancy foundation.
"""

from django.db import models
from django.db.models.functions import Lower
from uuid6 import uuid7

from apps.accounts.constants import DEFAULT_ROLE, Role
from apps.core.models import SoftDeleteManager, SoftDeleteMixin, TenantScopedModel, TimestampedModel


class Company(SoftDeleteMixin, TimestampedModel):
    """
    A tenant. Every business record carries a company FK and is only
    visible to principals of the same company.
    """

    id = models.UUIDField(primary_key=True, default=uuid7, editable=False)
    name = models.CharField(max_length=200)
    domain = models.CharField(max_length=255, blank=True, default="")
    logo = models.URLField(max_length=500, blank=True, default="")

    # Settings
    allow_user_registration = models.BooleanField(default=False)
    default_role = models.CharField(max_length=32, choices=Role.choices, default=DEFAULT_ROLE)

    objects = SoftDeleteManager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "companies"

    def __str__(self) -> str:
        return self.name


class Organization(TenantScopedModel):
    """Business unit within a company."""

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")

    class Meta(TenantScopedModel.Meta):
        constraints = [
            models.UniqueConstraint(
                Lower("name"),
                "company",
                condition=models.Q(deleted_at__isnull=True),
                name="uniq_active_organization_name_per_company",
            ),
        ]

    def __str__(self) -> str:
        return self.name
