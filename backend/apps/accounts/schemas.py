"""
Accounts API schemas - users and the current principal.
"""

from datetime import datetime
from uuid import UUID

from ninja import Schema
from pydantic import Field

from apps.core.schemas import ListParams, PaginationOut, PartialUpdate, Payload


class UserOut(Schema):
    id: UUID
    company_id: UUID
    email: str
    first_name: str
    last_name: str
    full_name: str
    avatar: str
    timezone: str
    roles: list[str]
    is_active: bool
    last_login: datetime | None = None
    created_at: datetime
    updated_at: datetime


class UserInvite(Payload):
    email: str | None = Field(None, examples=["jane@company.com"])
    first_name: str | None = None
    last_name: str | None = None
    roles: list[str] | None = Field(None, description="Defaults to the company's default role")
    timezone: str | None = None


class UserUpdate(PartialUpdate):
    """
    Profile fields are editable by the user themselves; ``roles`` and
    ``is_active`` by company admins only.
    """

    first_name: str | None = None
    last_name: str | None = None
    avatar: str | None = None
    timezone: str | None = None
    roles: list[str] | None = None
    is_active: bool | None = None
    email: str | None = None
    last_login: datetime | None = None


class UserListParams(ListParams):
    role: str | None = Field(None, description="Comma-separated role names")
    is_active: bool | None = None


class UserResponse(Schema):
    success: bool = True
    data: UserOut


class UserListResponse(Schema):
    success: bool = True
    data: list[UserOut]


class UserPageResponse(Schema):
    success: bool = True
    data: list[UserOut]
    pagination: PaginationOut


class CompanyInfo(Schema):
    id: UUID
    name: str
    domain: str
    logo: str


class MeOut(Schema):
    user: UserOut
    company: CompanyInfo
    roles: list[str]


class MeResponse(Schema):
    success: bool = True
    data: MeOut
