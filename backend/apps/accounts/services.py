"""
Accounts services - user management within a company.
"""

from typing import Any
from uuid import UUID

from django.db.models import Q

from apps.accounts.constants import ADMIN_ROLES, Role
from apps.accounts.models import User
from apps.accounts.schemas import UserOut
from apps.core.auth import AuthContext
from apps.core.exceptions import PermissionDeniedError, ValidationError
from apps.core.guards import MutationGuard, Unique
from apps.core.listing import FilterField
from apps.core.resources import Resource
from apps.realtime import relay

ADMIN_ONLY_FIELDS = frozenset({"roles", "is_active"})


def _role_token(raw: str) -> str:
    """Roles are stored as a JSON list; match the quoted element."""
    role = raw.strip()
    if role not in Role.values:
        raise ValueError(f"unknown role: {role}")
    return f'"{role}"'


def _valid_roles(values: dict[str, Any], existing) -> None:
    if "roles" not in values:
        return
    roles = values["roles"]
    if not isinstance(roles, list) or not roles:
        raise ValidationError("At least one role is required", details={"field": "roles"})
    unknown = sorted({r for r in roles if r not in Role.values})
    if unknown:
        raise ValidationError(
            f"Invalid roles: {', '.join(map(str, unknown))}",
            details={"field": "roles", "allowed": list(Role.values)},
        )
    values["roles"] = list(dict.fromkeys(roles))


class UserResource(Resource[User]):
    """
    Users of the caller's company.

    Everybody can read the directory and edit their own profile; inviting,
    changing roles or the active flag and deleting need an admin role.
    """

    model = User
    event_prefix = "user"
    out_schema = UserOut
    guard = MutationGuard(
        User,
        required=["email", "first_name", "last_name"],
        unique=[Unique("email", "A user with this email already exists")],
        validators=[_valid_roles],
        read_only=["last_login"],
        messages={"email": "Email is required"},
    )
    search_fields = ("first_name", "last_name", "email")
    filters = {
        "role": FilterField("roles__icontains", parse=_role_token),
        "is_active": FilterField("is_active"),
    }
    sort_fields = ("first_name", "last_name", "email", "created_at", "updated_at", "last_login")
    default_sort = "first_name"
    create_roles = ADMIN_ROLES
    delete_roles = ADMIN_ROLES

    def rooms(self, instance: User) -> list[str]:
        return [relay.company_room(instance.company_id), relay.user_room(instance.pk)]

    def create(self, ctx: AuthContext, payload: dict[str, Any]) -> User:
        if not payload.get("roles"):
            payload = {**payload, "roles": [ctx.company.default_role]}
        if isinstance(payload.get("email"), str):
            payload = {**payload, "email": payload["email"].strip().lower()}
        return super().create(ctx, payload)

    def update(self, ctx: AuthContext, pk: UUID | str, payload: dict[str, Any]) -> User:
        if not ctx.is_admin:
            if str(pk) != str(ctx.user_id):
                raise PermissionDeniedError("You can only update your own profile")
            restricted = sorted(ADMIN_ONLY_FIELDS & set(payload))
            if restricted:
                raise PermissionDeniedError(
                    f"Only administrators can change {', '.join(restricted)}",
                    details={"fields": restricted},
                )
        if "email" in payload:
            raise ValidationError("Email cannot be changed", details={"field": "email"})
        return super().update(ctx, pk, payload)

    def check_delete(self, instance: User, ctx: AuthContext) -> None:
        if instance.pk == ctx.user_id:
            raise ValidationError("You cannot delete your own account", details={"field": "id"})

    def active(self, ctx: AuthContext) -> list[User]:
        """Active users of the company, for owner / assignee pickers."""
        return list(self.store.find_scoped(ctx.company_id, Q(is_active=True)).order_by("first_name", "last_name"))


user_resource = UserResource()
