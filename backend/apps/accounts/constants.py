"""
Role vocabulary and the role sets that protected operations accept.

Authorization is capability-set intersection: a principal carries a set of
roles, each protected operation declares the roles it accepts, and access is
granted iff the two sets intersect.
"""

from django.db import models


class Role(models.TextChoices):
    """Roles a user can hold within their company."""

    SUPER_ADMIN = "Super_Admin"
    ADMIN = "Admin"
    PROJECT_MANAGER = "Project_Manager"
    TEAM_LEAD = "Team_Lead"
    TEAM_MEMBER = "Team_Member"
    CLIENT = "Client"


DEFAULT_ROLE = Role.TEAM_MEMBER

SUPER_ADMIN_ROLES = frozenset({Role.SUPER_ADMIN})
"""Platform-level operations: creating and deleting companies."""

ADMIN_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN})
"""Company administration: users, organizations, company settings."""

MANAGER_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.PROJECT_MANAGER})
"""Approvals and company-wide visibility of projects, tasks, bugs and time."""
