"""
Authentication context for request lifecycle.

Provides a typed container for the authenticated principal that BearerAuth
populates and endpoints consume. Services trust it and never re-derive
identity from the request.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID

from apps.accounts.constants import ADMIN_ROLES, MANAGER_ROLES
from apps.core.exceptions import PermissionDeniedError

if TYPE_CHECKING:
    from apps.accounts.models import User
    from apps.companies.models import Company


@dataclass(frozen=True)
class AuthContext:
    """
    Authenticated principal attached to request.auth by BearerAuth.

    Attributes:
        user: The authenticated User
        company: The tenant the user acts within
        roles: The user's role names at authentication time
    """

    user: "User"
    company: "Company"
    roles: frozenset[str] = field(default_factory=frozenset)

    @property
    def user_id(self) -> UUID:
        return self.user.id

    @property
    def company_id(self) -> UUID:
        return self.company.id

    @property
    def is_admin(self) -> bool:
        return bool(self.roles & ADMIN_ROLES)

    @property
    def is_manager(self) -> bool:
        """Admins and project managers see every record in the tenant."""
        return bool(self.roles & MANAGER_ROLES)

    def has_any_role(self, *roles: str) -> bool:
        return bool(self.roles.intersection(roles))

    def require_roles(self, *roles: str) -> "AuthContext":
        """
        Verify the principal holds at least one of the given roles.

        Returns:
            self, so endpoints can write ``ctx = get_auth_context(request).require_roles(...)``

        Raises:
            PermissionDeniedError: If the role sets do not intersect
        """
        if not self.has_any_role(*roles):
            raise PermissionDeniedError(
                details={"required_roles": sorted(roles)},
            )
        return self

    def require_admin(self) -> "AuthContext":
        return self.require_roles(*ADMIN_ROLES)

    def require_manager(self) -> "AuthContext":
        return self.require_roles(*MANAGER_ROLES)
