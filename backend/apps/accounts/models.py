"""
Accounts models - users and their company roles.
"""

from django.db import models
from django.db.models.functions import Lower
from uuid6 import uuid7

from apps.accounts.constants import Role
from apps.core.models import SoftDeleteManager, SoftDeleteMixin, TimestampedModel


class User(SoftDeleteMixin, TimestampedModel):
    """
    A person acting within exactly one company.

    Identity is asserted by a bearer token (see apps.core.security); this
    model holds the profile, the role set used for authorization and the
    company that scopes everything the user can see.
    """

    id = models.UUIDField(primary_key=True, default=uuid7, editable=False)
    company = models.ForeignKey(
        "companies.Company",
        on_delete=models.CASCADE,
        related_name="users",
    )

    # Profile - email is the global identifier
    email = models.EmailField(max_length=254)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    avatar = models.URLField(max_length=500, blank=True, default="")
    timezone = models.CharField(max_length=64, default="UTC")

    # Authorization
    roles = models.JSONField(default=list, help_text="Role names, see accounts.constants.Role")
    is_active = models.BooleanField(default=True)
    last_login = models.DateTimeField(null=True, blank=True)

    objects = SoftDeleteManager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                Lower("email"),
                condition=models.Q(deleted_at__isnull=True),
                name="uniq_active_user_email",
            ),
        ]

    def __str__(self) -> str:
        return self.email

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def role_set(self) -> frozenset[str]:
        """Roles as a set; unknown strings are dropped."""
        valid = set(Role.values)
        return frozenset(r for r in self.roles or [] if r in valid)
